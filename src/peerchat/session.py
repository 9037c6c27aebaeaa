from __future__ import annotations

import logging
import threading

from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS
from .errors import (
    Disconnected,
    TransportError,
    HandshakeRejected,
    NotConnected,
    SelfConnectError,
    UnexpectedMessage,
)
from .history import ConversationLog, Direction, Entry
from .message import Message, MessageKind
from .net import Address, UdpEndpoint

log = logging.getLogger(__name__)


class Session:
    """One chat endpoint talking to at most one peer at a time.

    All socket calls block. The peer address and the conversation log are
    each behind their own lock, held only for a single read or write and
    never across a socket call, so a thread blocked in ``receive_text`` does
    not stop another thread from sending or checking ``is_connected``.

    Datagrams from anyone other than the current peer (or the connect
    target, during ``connect``) are answered with ``Unexpected`` and
    dropped.
    """

    def __init__(self, udp: UdpEndpoint):
        self.udp = udp
        self._address = udp.address
        self._peer: Address | None = None
        self._peer_lock = threading.Lock()
        self._log = ConversationLog()

    @classmethod
    def bind(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> "Session":
        return cls(UdpEndpoint.bind(host, port, timeout_ms=timeout_ms))

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.udp.close()

    # -- state -----------------------------------------------------------

    def address(self) -> Address:
        return self._address

    def peer_address(self) -> Address | None:
        with self._peer_lock:
            return self._peer

    def _set_peer(self, addr: Address | None) -> None:
        with self._peer_lock:
            self._peer = addr
        if addr is None:
            log.info("peer cleared")
        else:
            log.info("peer set to %s:%d", addr[0], addr[1])

    def _require_peer(self) -> Address:
        peer = self.peer_address()
        if peer is None:
            raise NotConnected()
        return peer

    def is_connected(self) -> bool:
        return self.peer_address() is not None

    def history(self, peer: Address | None = None) -> list[Entry] | None:
        if peer is None:
            peer = self.peer_address()
            if peer is None:
                return None
        peer = _normalize(peer)
        if peer not in self._log:
            return None
        return self._log.entries(peer)

    def known_peers(self) -> list[Address]:
        return self._log.peers()

    # -- sending ---------------------------------------------------------

    def _send_to(self, message: Message, addr: Address) -> None:
        if message.is_text:
            self._log.append(addr, Direction.SENT, message.text)
        self.udp.sendto(message.to_bytes(), addr)

    def _reject(self, addr: Address) -> None:
        log.debug("rejecting datagram from %s:%d", addr[0], addr[1])
        try:
            self.udp.sendto(Message.unexpected().to_bytes(), addr)
        except TransportError as exc:
            log.warning("could not reject %s:%d: %s", addr[0], addr[1], exc)

    def send(self, message: Message | str) -> None:
        if isinstance(message, str):
            message = Message.text_message(message)
        self._send_to(message, self._require_peer())

    def disconnect(self) -> None:
        """Ask the peer to end the session.

        The peer's acknowledgement is picked up by whoever is receiving;
        ``receive_text`` then raises ``Disconnected`` and clears the peer.
        """
        self.send(Message.disconnect())

    # -- handshake -------------------------------------------------------

    def listen(self) -> Address:
        """Wait for one datagram and accept it if it is a connection request.

        Anything else is consumed and reported as an error; call again to
        keep waiting.
        """
        raw, addr = self.udp.recvfrom()
        message = Message.from_bytes(raw)
        if message.kind is not MessageKind.TRY_CONNECT:
            raise UnexpectedMessage(message, "expected a connection request")
        self._send_to(Message.connection_accepted(), addr)
        self._set_peer(addr)
        return addr

    def connect(self, target: Address) -> Address:
        target = self.udp.resolve(target)
        if target == self._address:
            raise SelfConnectError()

        self._send_to(Message.try_connect(), target)

        while True:
            raw, addr = self.udp.recvfrom()
            if addr != target:
                self._reject(addr)
                continue

            message = Message.from_bytes(raw)
            if message.kind is MessageKind.CONNECTION_ACCEPTED:
                self._set_peer(target)
                return target
            if message.kind is MessageKind.UNEXPECTED:
                raise HandshakeRejected()
            raise UnexpectedMessage(message, "unexpected response to connect")

    # -- receiving -------------------------------------------------------

    def receive_raw(self) -> Message:
        while True:
            self._require_peer()
            raw, addr = self.udp.recvfrom()
            peer = self.peer_address()
            if addr != peer:
                self._reject(addr)
                if peer is None:
                    raise NotConnected()
                continue

            message = Message.from_bytes(raw)
            if message.is_text:
                self._log.append(addr, Direction.RECEIVED, message.text)
            return message

    def receive_text(self) -> str:
        message = self.receive_raw()

        if message.is_text:
            return message.text

        if message.kind is MessageKind.DISCONNECT:
            peer = self.peer_address()
            if peer is not None:
                try:
                    self._send_to(Message.disconnect_ack(), peer)
                except TransportError as exc:
                    log.warning("could not acknowledge disconnect: %s", exc)
            self._set_peer(None)
            raise Disconnected()

        if message.kind is MessageKind.DISCONNECT_ACK:
            self._set_peer(None)
            raise Disconnected()

        raise UnexpectedMessage(message)


def _normalize(addr: Address) -> Address:
    return str(addr[0]), int(addr[1])
