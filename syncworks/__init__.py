"""Concurrency building blocks: lock-free stacks, hazard pointers, shared references, a growable array and a small caching server."""

__version__ = "0.1.0"

__all__ = [
    "adt",
    "arc",
    "cache",
    "growable_array",
    "handler",
    "hazard",
    "retire",
    "server",
    "stack",
    "statistics",
    "tcp",
    "thread_pool",
]