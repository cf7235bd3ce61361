"""Shared value types used across feature modules."""

from .origin import RequestOrigin

__all__ = ["RequestOrigin"]
