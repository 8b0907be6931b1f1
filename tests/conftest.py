from __future__ import annotations

import logging
import socket
from typing import Iterator, List

import pytest

from gelflog.core.errors import NetworkError
from gelflog.core.manager import GLOBAL_MANAGER
from gelflog.core.publisher import GLOBAL_STATS


@pytest.fixture(autouse=True)
def reset_gelflog() -> Iterator[None]:
    yield
    GLOBAL_MANAGER.shutdown()
    GLOBAL_STATS.reset()
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)
    logging.captureWarnings(False)


@pytest.fixture
def collector() -> Iterator[socket.socket]:
    """A loopback UDP socket standing in for a GELF collector."""

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    try:
        yield sock
    finally:
        sock.close()


class RecordingTransport:
    """Transport double that keeps datagrams and can fail on demand."""

    def __init__(self, failures: int = 0, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or NetworkError("network unreachable")
        self.attempts: List[List[bytes]] = []
        self.closed = False

    def send(self, datagrams) -> int:
        batch = list(datagrams)
        self.attempts.append(batch)
        if self.failures > 0:
            self.failures -= 1
            raise self.error
        return len(batch)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
