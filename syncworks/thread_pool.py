"""Fixed-size thread pool that joins its workers when closed."""

from __future__ import annotations

import queue
import threading
from typing import Callable, List

_STOP = object()


class WorkerPanicked(RuntimeError):
    """A job run by the pool raised; the errors are in ``errors``."""

    def __init__(self, errors: List[BaseException]) -> None:
        super().__init__(f"{len(errors)} job(s) in the thread pool raised")
        self.errors = errors


class ThreadPool:
    """Runs submitted jobs on ``size`` worker threads."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("thread pool size must be positive")
        self._jobs: queue.SimpleQueue = queue.SimpleQueue()
        self._idle = threading.Condition()
        self._pending = 0
        self._closed = False
        self._errors: List[BaseException] = []
        self._workers = [
            threading.Thread(target=self._work, name=f"pool-worker-{i}", daemon=True)
            for i in range(size)
        ]
        for worker in self._workers:
            worker.start()

    def _work(self) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                return
            try:
                job()
            except BaseException as err:  # recorded and reported on close
                with self._idle:
                    self._errors.append(err)
            finally:
                with self._idle:
                    self._pending -= 1
                    if self._pending == 0:
                        self._idle.notify_all()

    def execute(self, f: Callable[[], object]) -> None:
        """Queue ``f`` to run on a worker."""
        with self._idle:
            if self._closed:
                raise RuntimeError("thread pool is closed")
            self._pending += 1
            self._jobs.put(f)

    def join(self) -> None:
        """Block until every submitted job has finished."""
        with self._idle:
            self._idle.wait_for(lambda: self._pending == 0)

    def close(self) -> None:
        """Stop accepting jobs, finish the queued ones and join the workers.

        Raises ``WorkerPanicked`` if any job raised.
        """
        with self._idle:
            if self._closed:
                return
            self._closed = True
            for _ in self._workers:
                self._jobs.put(_STOP)
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()
        with self._idle:
            errors = list(self._errors)
        if errors:
            raise WorkerPanicked(errors) from errors[0]

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()