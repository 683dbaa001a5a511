"""TCP listener whose accept loop can be cancelled from another thread."""

from __future__ import annotations

import socket
import threading
from typing import Iterator, Tuple, Union

Address = Union[str, Tuple[str, int]]

_WILDCARDS = {"0.0.0.0": "127.0.0.1", "": "127.0.0.1", "::": "::1"}


def _split_address(addr: Address) -> Tuple[str, int]:
    if isinstance(addr, str):
        host, sep, port = addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"address must look like host:port, got {addr!r}")
        return host.strip("[]"), int(port)
    host, port = addr
    return host, int(port)


class CancellableTcpListener:
    """A listening socket whose ``incoming`` iterator stops once cancelled."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._canceled = threading.Event()

    @classmethod
    def bind(cls, addr: Address) -> "CancellableTcpListener":
        """Listen on ``addr``, trying each address it resolves to."""
        host, port = _split_address(addr)
        last_error: OSError = OSError(f"could not resolve {host!r}")
        for family, _, _, _, sockaddr in socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
        ):
            try:
                sock = socket.create_server(sockaddr[:2], family=family)
            except OSError as err:
                last_error = err
                continue
            return cls(sock)
        raise last_error

    def local_addr(self) -> Tuple[str, int]:
        return self._sock.getsockname()[:2]

    def cancel(self) -> None:
        """Stop accepting connections and wake a blocked ``accept``."""
        self._canceled.set()
        host, port = self.local_addr()
        host = _WILDCARDS.get(host, host)
        socket.create_connection((host, port)).close()

    def incoming(self) -> Iterator[socket.socket]:
        """Yield accepted connections until the listener is cancelled."""
        while not self._canceled.is_set():
            try:
                conn, _ = self._sock.accept()
            except OSError:
                if self._canceled.is_set():
                    return
                raise
            if self._canceled.is_set():
                conn.close()
                return
            yield conn

    def close(self) -> None:
        self._sock.close()