"""Common utility functions."""

from .clock import parse_hhmm, next_occurrence

__all__ = [
    "parse_hhmm",
    "next_occurrence",
]
