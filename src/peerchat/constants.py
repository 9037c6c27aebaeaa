from __future__ import annotations

# first byte of every datagram
CONTROL = 0
TEXT = 1

# second byte of a control datagram
TRY_CONNECT = 1
CONNECTION_ACCEPTED = 2
UNEXPECTED = 3
DISCONNECT = 4
DISCONNECT_ACK = 5

TEXT_TERMINATOR = 0

MAX_DATAGRAM = 65535

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 0
DEFAULT_TIMEOUT_MS = 0  # block forever
