import socket
from concurrent.futures import ThreadPoolExecutor

import pytest

from syncworks.tcp import CancellableTcpListener


@pytest.fixture
def listener():
    lst = CancellableTcpListener.bind(("127.0.0.1", 0))
    try:
        yield lst
    finally:
        lst.close()


def test_bind_assigns_port(listener):
    host, port = listener.local_addr()
    assert host == "127.0.0.1"
    assert port > 0


def test_bind_from_string():
    lst = CancellableTcpListener.bind("127.0.0.1:0")
    try:
        assert lst.local_addr()[0] == "127.0.0.1"
    finally:
        lst.close()


def test_bind_rejects_malformed_address():
    with pytest.raises(ValueError):
        CancellableTcpListener.bind("nonsense")


def test_incoming_yields_connection(listener):
    client = socket.create_connection(listener.local_addr())
    try:
        conn = next(listener.incoming())
        with conn:
            client.sendall(b"ping")
            assert conn.recv(4) == b"ping"
    finally:
        client.close()


def test_cancel_stops_blocked_iteration(listener):
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(lambda: list(listener.incoming()))
        listener.cancel()
        accepted = future.result(timeout=5)
    assert accepted == []


def test_incoming_after_cancel_is_empty(listener):
    listener.cancel()
    assert list(listener.incoming()) == []