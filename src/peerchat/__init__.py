"""peerchat: one-to-one text chat over UDP.

The pieces mirror how the protocol is layered:
- ``message``: datagram framing for control and text messages
- ``net``: the bound UDP socket
- ``session``: handshake, peer filtering and disconnect state machine
- ``history``: per-peer conversation log
- ``cli``: terminal front end
"""

from .errors import (
    ChatError,
    DecodeError,
    Disconnected,
    HandshakeRejected,
    NotConnected,
    SelfConnectError,
    TransportError,
    UnexpectedMessage,
)
from .history import Direction, Entry
from .message import Message, MessageKind
from .session import Session

__all__ = [
    "ChatError",
    "DecodeError",
    "Direction",
    "Disconnected",
    "Entry",
    "HandshakeRejected",
    "Message",
    "MessageKind",
    "NotConnected",
    "SelfConnectError",
    "Session",
    "TransportError",
    "UnexpectedMessage",
]
