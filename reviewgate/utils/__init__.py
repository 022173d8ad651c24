"""Utility functions."""

from reviewgate.utils.time import now_s

__all__ = ["now_s"]
