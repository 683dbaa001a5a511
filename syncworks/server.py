"""Hello server: answers keyed requests and reports statistics on shutdown."""

from __future__ import annotations

import argparse
import functools
import queue
import signal
import sys
import threading
from typing import NamedTuple, Optional, Sequence

from syncworks.handler import Handler
from syncworks.statistics import Statistics
from syncworks.tcp import CancellableTcpListener
from syncworks.thread_pool import ThreadPool

DEFAULT_ADDR = "localhost:7878"
DEFAULT_THREADS = 7
_MIN_THREADS = 3

_FAILED = object()


class _Done(NamedTuple):
    accepted: int


def serve(
    listener: CancellableTcpListener,
    pool: ThreadPool,
    handler: Optional[Handler] = None,
) -> Statistics:
    """Serve connections on ``pool`` until ``listener`` is cancelled.

    Runs the accept loop and the reporter as pool jobs, one job per
    connection, and returns the statistics once every connection is done.
    """
    handler = handler if handler is not None else Handler()
    reports: queue.SimpleQueue = queue.SimpleQueue()
    results: queue.SimpleQueue = queue.SimpleQueue()

    def handle(request_id, stream):
        try:
            report = handler.handle_conn(request_id, stream)
        except BaseException:
            reports.put(_FAILED)
            raise
        reports.put(report)

    def listen():
        accepted = 0
        try:
            for request_id, stream in enumerate(listener.incoming()):
                pool.execute(functools.partial(handle, request_id, stream))
                accepted += 1
        finally:
            reports.put(_Done(accepted))

    def report():
        stats = Statistics()
        expected = None
        received = 0
        while expected is None or received < expected:
            item = reports.get()
            if isinstance(item, _Done):
                expected = item.accepted
                continue
            received += 1
            if item is _FAILED:
                continue
            print(f"[report] {item!r}")
            stats.add_report(item)
        print("[sending stat]")
        results.put(stats)
        print("[sent stat]")

    pool.execute(listen)
    pool.execute(report)
    return results.get()


def _pool_size(text: str) -> int:
    value = int(text)
    if value < _MIN_THREADS:
        raise argparse.ArgumentTypeError(f"need at least {_MIN_THREADS} threads")
    return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="syncworks-server",
        description="Serve GET /KEY requests with a cached computation.",
    )
    parser.add_argument("--addr", default=DEFAULT_ADDR, help="host:port to listen on")
    parser.add_argument("--threads", type=_pool_size, default=DEFAULT_THREADS)
    args = parser.parse_args(argv)

    print(f"Run `curl http://{args.addr}/KEY` to query the server with KEY")
    try:
        listener = CancellableTcpListener.bind(args.addr)
    except (OSError, ValueError) as err:
        print(f"cannot listen on {args.addr}: {err}", file=sys.stderr)
        return 1

    def on_interrupt(signum, frame):
        threading.Thread(target=listener.cancel, daemon=True).start()

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        with ThreadPool(args.threads) as pool:
            stats = serve(listener, pool, Handler())
            print(f"[stat] {stats!r}")
    finally:
        signal.signal(signal.SIGINT, previous)
        listener.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())