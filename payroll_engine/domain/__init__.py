"""Domain layer definitions."""

from .runs import BatchEntry, BatchError, BatchResult

__all__ = [
    "BatchEntry",
    "BatchError",
    "BatchResult",
]
