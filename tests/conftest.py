from __future__ import annotations

import socket
import threading

import pytest

from peerchat.session import Session

TIMEOUT_MS = 5000


class Worker:
    def __init__(self, fn):
        self.result = None
        self.error: BaseException | None = None
        self.thread = threading.Thread(target=self._run, args=(fn,), daemon=True)
        self.thread.start()

    def _run(self, fn):
        try:
            self.result = fn()
        except BaseException as exc:
            self.error = exc

    def join(self):
        self.thread.join(timeout=10.0)
        assert not self.thread.is_alive(), "worker did not finish"
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def spawn():
    return Worker


@pytest.fixture
def make_session():
    sessions = []

    def factory() -> Session:
        s = Session.bind(timeout_ms=TIMEOUT_MS)
        sessions.append(s)
        return s

    yield factory
    for s in sessions:
        s.close()


@pytest.fixture
def stranger():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(TIMEOUT_MS / 1000.0)
    yield sock
    sock.close()


@pytest.fixture
def connect_pair(spawn):
    def connect(listener: Session, initiator: Session) -> None:
        w = spawn(lambda: initiator.connect(listener.address()))
        listener.listen()
        w.join()

    return connect
