from __future__ import annotations

import enum
from dataclasses import dataclass

from .constants import (
    CONNECTION_ACCEPTED,
    CONTROL,
    DISCONNECT,
    DISCONNECT_ACK,
    TEXT,
    TEXT_TERMINATOR,
    TRY_CONNECT,
    UNEXPECTED,
)
from .errors import DecodeError


class MessageKind(enum.Enum):
    TRY_CONNECT = "try_connect"
    CONNECTION_ACCEPTED = "connection_accepted"
    UNEXPECTED = "unexpected"
    DISCONNECT = "disconnect"
    DISCONNECT_ACK = "disconnect_ack"
    TEXT = "text"


_CONTROL_CODES = {
    MessageKind.TRY_CONNECT: TRY_CONNECT,
    MessageKind.CONNECTION_ACCEPTED: CONNECTION_ACCEPTED,
    MessageKind.UNEXPECTED: UNEXPECTED,
    MessageKind.DISCONNECT: DISCONNECT,
    MessageKind.DISCONNECT_ACK: DISCONNECT_ACK,
}
_CONTROL_KINDS = {code: kind for kind, code in _CONTROL_CODES.items()}

_DESCRIPTIONS = {
    MessageKind.TRY_CONNECT: "Connection request",
    MessageKind.CONNECTION_ACCEPTED: "Connection accepted",
    MessageKind.UNEXPECTED: "Unexpected message",
    MessageKind.DISCONNECT: "Disconnect",
    MessageKind.DISCONNECT_ACK: "Disconnect acknowledged",
}


@dataclass(frozen=True, slots=True)
class Message:
    kind: MessageKind
    text: str = ""

    @property
    def is_text(self) -> bool:
        return self.kind is MessageKind.TEXT

    def __str__(self) -> str:
        if self.is_text:
            return f"Message: {self.text}"
        return _DESCRIPTIONS[self.kind]

    def to_bytes(self) -> bytes:
        if self.is_text:
            return bytes([TEXT]) + self.text.encode("utf-8") + bytes([TEXT_TERMINATOR])
        return bytes([CONTROL, _CONTROL_CODES[self.kind]])

    @staticmethod
    def from_bytes(raw: bytes) -> "Message":
        if not raw:
            raise DecodeError("unknown message type: empty datagram")

        if raw[0] == CONTROL:
            if len(raw) < 2:
                raise DecodeError("unknown control message: datagram too small")
            kind = _CONTROL_KINDS.get(raw[1])
            if kind is None:
                raise DecodeError(f"unknown control message: {raw[1]}")
            return Message(kind)

        if raw[0] == TEXT:
            # the last byte is the terminator; it is dropped without being checked
            return Message.text_message(raw[1:-1].decode("utf-8", errors="replace"))

        raise DecodeError(f"unknown message type: {raw[0]}")

    @staticmethod
    def text_message(text: str) -> "Message":
        return Message(MessageKind.TEXT, text)

    @staticmethod
    def try_connect() -> "Message":
        return Message(MessageKind.TRY_CONNECT)

    @staticmethod
    def connection_accepted() -> "Message":
        return Message(MessageKind.CONNECTION_ACCEPTED)

    @staticmethod
    def unexpected() -> "Message":
        return Message(MessageKind.UNEXPECTED)

    @staticmethod
    def disconnect() -> "Message":
        return Message(MessageKind.DISCONNECT)

    @staticmethod
    def disconnect_ack() -> "Message":
        return Message(MessageKind.DISCONNECT_ACK)
