"""Utility modules."""

from .timer_utils import elapsed_ms

__all__ = ["elapsed_ms"]
