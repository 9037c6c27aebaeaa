from __future__ import annotations

import logging
import socket
from typing import Tuple

from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS, MAX_DATAGRAM
from .errors import TransportError

Address = Tuple[str, int]

log = logging.getLogger(__name__)


class UdpEndpoint:
    """Unconnected UDP socket bound to one local address."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    @classmethod
    def bind(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET6 if ":" in host else socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            raise TransportError(f"cannot bind {host}:{port}: {exc}") from exc
        if timeout_ms > 0:
            sock.settimeout(timeout_ms / 1000.0)
        return cls(sock)

    @property
    def address(self) -> Address:
        host, port = self.sock.getsockname()[:2]
        return host, port

    def resolve(self, addr: Address) -> Address:
        """Turn ``(host, port)`` into the IP-literal form ``recvfrom`` reports."""
        host, port = addr[0], int(addr[1])
        try:
            infos = socket.getaddrinfo(host, port, self.sock.family, socket.SOCK_DGRAM)
        except OSError as exc:
            raise TransportError(f"cannot resolve {host}:{port}: {exc}") from exc
        sockaddr = infos[0][4]
        return sockaddr[0], sockaddr[1]

    def sendto(self, data: bytes, addr: Address) -> None:
        try:
            self.sock.sendto(data, addr)
        except OSError as exc:
            raise TransportError(f"send to {addr[0]}:{addr[1]} failed: {exc}") from exc
        log.debug("sent %d bytes to %s:%d", len(data), addr[0], addr[1])

    def recvfrom(self, bufsize: int = MAX_DATAGRAM) -> Tuple[bytes, Address]:
        try:
            data, addr = self.sock.recvfrom(bufsize)
        except OSError as exc:
            raise TransportError(f"receive failed: {exc}") from exc
        log.debug("received %d bytes from %s:%d", len(data), addr[0], addr[1])
        return data, (addr[0], addr[1])

    def close(self) -> None:
        self.sock.close()
