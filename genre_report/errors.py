"""Exceptions raised by the genre report pipeline."""
from __future__ import annotations


class SchemaError(ValueError):
    """A frame is missing a column the pipeline needs."""


class InsufficientDataError(ValueError):
    """Too few rows (or rows per label) to sample or tune."""


def require_seed(seed: int | None) -> int:
    if seed is None:
        raise ValueError("An explicit seed is required for randomized steps")
    return int(seed)
