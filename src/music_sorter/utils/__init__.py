"""Utility functions for music sorter."""

from music_sorter.utils.security import PathValidationError, SecurityUtils

__all__ = [
    "PathValidationError",
    "SecurityUtils",
]
