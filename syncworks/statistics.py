"""Per-request reports and the statistics gathered from them."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Report:
    """Outcome of one request; ``key`` is ``None`` for an invalid request."""

    id: int
    key: Optional[str]


class Statistics:
    """Counts how often each key was requested."""

    def __init__(self) -> None:
        self._hits: Counter = Counter()

    def add_report(self, report: Report) -> None:
        self._hits[report.key] += 1

    def hits(self, key: Optional[str]) -> int:
        """Number of reports with ``key``; ``None`` counts invalid requests."""
        return self._hits[key]

    def __repr__(self) -> str:
        return f"Statistics(hits={dict(self._hits)!r})"