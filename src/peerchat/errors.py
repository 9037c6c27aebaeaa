from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .message import Message


class ChatError(Exception):
    """Base class for everything the session layer raises."""


class NotConnected(ChatError):
    def __init__(self, msg: str = "not connected"):
        super().__init__(msg)


class DecodeError(ChatError, ValueError):
    pass


class SelfConnectError(ChatError):
    def __init__(self, msg: str = "cannot connect to self"):
        super().__init__(msg)


class HandshakeRejected(ChatError):
    def __init__(self, msg: str = "peer is not accepting connections"):
        super().__init__(msg)


class UnexpectedMessage(ChatError):
    def __init__(self, message: "Message", context: str = "unexpected message"):
        super().__init__(f"{context}: {message}")
        self.message = message


class Disconnected(ChatError):
    def __init__(self, msg: str = "disconnected"):
        super().__init__(msg)


class TransportError(ChatError, OSError):
    pass
