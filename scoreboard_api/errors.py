# scoreboard_api/errors.py
from __future__ import annotations


class ScoringError(Exception):
    """Base class for every failure the scoring engine reports to callers."""
    pass


class ValidationError(ScoringError):
    """Raised when a command is malformed (bad team side, run value, extra type...)."""
    pass


class InvalidStateError(ScoringError):
    """Raised when a well-formed command is not allowed in the match's current state."""
    pass


class NotFoundError(ScoringError):
    """Raised when a match or player reference does not exist."""
    pass


class NoHistoryError(ScoringError):
    """Raised when undo is requested but there is nothing to undo."""
    pass
