"""Shared validation helpers."""

from __future__ import annotations


def validate_positive_int(value: int, *, name: str) -> None:
    """Ensure *value* is a strictly positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer"
        raise TypeError(msg)

    if value <= 0:
        msg = f"{name} must be > 0"
        raise ValueError(msg)
