from __future__ import annotations


class RushHourError(Exception):
    """Base exception class for Rush Hour errors."""


class LevelError(RushHourError):
    """Raised when a level definition cannot be turned into a board."""


class InvalidMove(RushHourError):
    """Raised when two boards are not one legal move apart."""


class SearchInvariantError(RushHourError):
    """Raised when the search bookkeeping is inconsistent."""
