from __future__ import annotations

import argparse
import ipaddress
import logging
import queue
import sys
import threading
from typing import Iterable

from .constants import DEFAULT_HOST, DEFAULT_PORT
from .errors import ChatError, TransportError
from .net import Address
from .session import Session

LISTEN_COMMAND = "listen"
LEAVE_COMMAND = "/leave"
SHUTDOWN_TIMEOUT = 2.0

log = logging.getLogger(__name__)


def parse_target(text: str, local: Address) -> Address | None:
    """Turn a line of user input into a connect target.

    ``listen`` gives ``None``; a bare port means that port on the local host;
    otherwise ``host:port`` with an IP literal (IPv6 in brackets).
    """
    text = text.strip()
    if text == LISTEN_COMMAND:
        return None
    if text.isdigit():
        return local[0], _port(text)

    host, sep, port = text.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"not a port or host:port address: {text!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 addresses must be bracketed: {text!r}")
    return str(ipaddress.ip_address(host)), _port(port)


def _port(text: str) -> int:
    port = int(text)
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {port}")
    return port


def connect_or_listen(session: Session, text: str) -> Address:
    target = parse_target(text, session.address())
    if target is None:
        return session.listen()
    return session.connect(target)


class ChatApp:
    """Terminal front end: input lines go through a queue to a sender thread.

    A receiver thread is started after every successful handshake and ends
    on its own once the session is disconnected.
    """

    def __init__(self, session: Session, clear_screen: bool = False, shutdown_timeout: float = SHUTDOWN_TIMEOUT):
        self.session = session
        self.clear_screen = clear_screen
        self.shutdown_timeout = shutdown_timeout
        self.lines: queue.Queue[str | None] = queue.Queue()
        self._sender = threading.Thread(target=self._send_loop, name="peerchat-sender", daemon=True)
        self._receiver: threading.Thread | None = None

    def run(self, lines: Iterable[str]) -> int:
        self._sender.start()
        self.greeting()
        for line in lines:
            self.lines.put(line.rstrip("\r\n"))
        self.lines.put(None)
        # a sender blocked in listen/connect never sees the end of input
        self._sender.join(timeout=self.shutdown_timeout)
        if self._sender.is_alive():
            log.warning("sender still waiting for a handshake; exiting anyway")
            return 0
        if self._receiver is not None:
            self._receiver.join(timeout=1.0)
        return 0

    # -- presentation ----------------------------------------------------

    def clear(self) -> None:
        if self.clear_screen:
            print("\x1b[2J\x1b[1;1H", end="")

    def greeting(self) -> None:
        self.clear()
        host, port = self.session.address()
        print(f"Local address: {host}:{port}")
        print(f"Write a target address or port you want to chat with or type '{LISTEN_COMMAND}'")

    def open_chat(self) -> None:
        self.clear()
        peer = self.session.peer_address()
        if peer is None:
            return
        print(f"connected to {peer[0]}:{peer[1]}")
        for entry in self.session.history() or ():
            print(entry.text if entry.outgoing else f"Message: {entry.text}")

    # -- threads ---------------------------------------------------------

    def handle_line(self, line: str) -> None:
        if self.session.is_connected():
            if line.strip() == LEAVE_COMMAND:
                self.session.disconnect()
            else:
                self.session.send(line)
            return

        if not line.strip():
            return
        connect_or_listen(self.session, line)
        self.open_chat()
        self.spawn_receiver()

    def spawn_receiver(self) -> None:
        self._receiver = threading.Thread(target=self._receive_loop, name="peerchat-receiver", daemon=True)
        self._receiver.start()

    def _send_loop(self) -> None:
        while True:
            line = self.lines.get()
            if line is None:
                break
            try:
                self.handle_line(line)
            except ChatError as exc:
                print(f"Can't send message: {exc}" if self.session.is_connected() else exc)
            except ValueError as exc:
                print(exc)

        if self.session.is_connected():
            try:
                self.session.disconnect()
            except ChatError as exc:
                log.warning("disconnect on exit failed: %s", exc)

    def _receive_loop(self) -> None:
        while True:
            try:
                text = self.session.receive_text()
            except TransportError as exc:
                log.error("receiver stopped: %s", exc)
                return
            except ChatError as exc:
                if not self.session.is_connected():
                    self.greeting()
                    return
                print(exc)
                continue
            print(f"Message: {text}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="peerchat", description="Peer-to-peer text chat over UDP.")
    p.add_argument("--host", default=DEFAULT_HOST, help="local address to bind")
    p.add_argument("--port", type=int, default=DEFAULT_PORT, help="local port to bind (0 = any free port)")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--no-clear", action="store_true", help="never clear the terminal")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        session = Session.bind(args.host, args.port)
    except TransportError as exc:
        print(f"Can't use port {args.port}: {exc}", file=sys.stderr)
        return 1

    with session:
        app = ChatApp(session, clear_screen=not args.no_clear and sys.stdout.isatty())
        return app.run(sys.stdin)


if __name__ == "__main__":
    raise SystemExit(main())
