"""UDP datagram transport for GELF messages."""

from __future__ import annotations

import socket
import threading
from typing import Any, Iterable, Tuple

from ..core.errors import NetworkError

__all__ = ["UDPTransport"]


class UDPTransport:
    """Fire-and-forget sender for GELF datagrams.

    By default every :meth:`send` opens and closes its own socket, so
    concurrent callers share nothing. With ``reuse_socket`` a single socket
    is kept and access to it is serialized by a lock.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        timeout: float | None = None,
        reuse_socket: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.reuse_socket = reuse_socket
        self._lock = threading.Lock()
        self._sock: socket.socket | None = None
        self._address: Tuple[Any, ...] | None = None

    def send(self, datagrams: Iterable[bytes]) -> int:
        """Send each datagram once and return how many were sent."""

        try:
            if self.reuse_socket:
                with self._lock:
                    if self._sock is None:
                        self._sock, self._address = self._open()
                    return self._send_all(self._sock, self._address, datagrams)
            sock, address = self._open()
            with sock:
                return self._send_all(sock, address, datagrams)
        except OSError as exc:
            if self.reuse_socket:
                self.close()
            raise NetworkError(f"Cannot send GELF datagram to {self.host}:{self.port}: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            if self._sock is not None:
                self._sock.close()
            self._sock = None
            self._address = None

    def _open(self) -> Tuple[socket.socket, Tuple[Any, ...]]:
        family, socktype, proto, _, address = socket.getaddrinfo(
            self.host, self.port, 0, socket.SOCK_DGRAM
        )[0]
        sock = socket.socket(family, socktype, proto)
        if self.timeout is not None:
            sock.settimeout(self.timeout)
        return sock, address

    @staticmethod
    def _send_all(sock: socket.socket, address: Any, datagrams: Iterable[bytes]) -> int:
        sent = 0
        for datagram in datagrams:
            sock.sendto(datagram, address)
            sent += 1
        return sent

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.host!r}, {self.port})"
