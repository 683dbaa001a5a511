"""Request handler that answers ``GET /<key>`` with a cached computation."""

from __future__ import annotations

import re
import socket
import time
from typing import Callable, Optional, Tuple

from syncworks.cache import Cache
from syncworks.statistics import Report

_REQUEST = re.compile(r"GET /(?P<key>\w+) HTTP/1.1\r\n")

_OK = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Hello!</title>
  </head>
  <body>
    <p>Result for key "{key}" is "{result}"</p>
  </body>
</html>"""

_NOT_FOUND = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Hello!</title>
  </head>
  <body>
    <h1>Oops!</h1>
    <p>Sorry, I don't know what you're asking for.</p>
  </body>
</html>"""

_READ_SIZE = 512


def expensive_computation(key: str) -> str:
    """Compute the result for ``key``; takes a few seconds."""
    print(f"[handler] doing computation for key: {key}")
    time.sleep(3)
    return f"{key}🐕"


def parse_key(request: bytes) -> Optional[str]:
    """Extract the key from a ``GET /<key> HTTP/1.1`` request line."""
    match = _REQUEST.search(request.decode("utf-8", errors="replace"))
    return match.group("key") if match else None


class Handler:
    """Answers requests, sharing one cache between all connections."""

    def __init__(
        self,
        cache: Optional[Cache] = None,
        compute: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.cache = cache if cache is not None else Cache()
        self.compute = compute if compute is not None else expensive_computation

    def respond(self, request: bytes) -> Tuple[Optional[str], bytes]:
        """Return the parsed key and the full HTTP response for ``request``."""
        key = parse_key(request)
        if key is None:
            text = f"HTTP/1.1 404 NOT FOUND\r\n\r\n{_NOT_FOUND}"
        else:
            result = self.cache.get_or_insert_with(key, self.compute)
            body = _OK.replace("{key}", key).replace("{result}", result)
            text = f"HTTP/1.1 200 OK\r\n\r\n{body}"
        return key, text.encode("utf-8")

    def handle_conn(self, request_id: int, stream: socket.socket) -> Report:
        """Serve one connection, close it, and report what was asked for."""
        with stream:
            request = stream.recv(_READ_SIZE)
            key, response = self.respond(request)
            stream.sendall(response)
        return Report(request_id, key)