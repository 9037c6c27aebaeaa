from __future__ import annotations

import enum
import threading
from dataclasses import dataclass

from .net import Address


class Direction(enum.Enum):
    SENT = "sent"
    RECEIVED = "received"


@dataclass(frozen=True, slots=True)
class Entry:
    direction: Direction
    text: str

    @property
    def outgoing(self) -> bool:
        return self.direction is Direction.SENT


class ConversationLog:
    """Per-peer chat history, kept for the lifetime of the process.

    Entries are only ever appended; a peer that reconnects continues its
    existing list.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Address, list[Entry]] = {}

    def append(self, peer: Address, direction: Direction, text: str) -> None:
        with self._lock:
            self._entries.setdefault(peer, []).append(Entry(direction, text))

    def entries(self, peer: Address) -> list[Entry]:
        with self._lock:
            return list(self._entries.get(peer, ()))

    def peers(self) -> list[Address]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, peer: object) -> bool:
        with self._lock:
            return peer in self._entries
