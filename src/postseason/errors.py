"""Postseason error taxonomy.

Models raise these; the controller catches the recoverable ones, logs them,
and reports them through ``RecordOutcome`` so the surrounding simulation loop
never crashes on a late or duplicate call. ``InitializationError`` is the one
category the controller lets propagate: it signals a caller contract violation.
"""

from __future__ import annotations


class PlayoffError(Exception):
    """Base class for every postseason engine error."""


class SequenceError(PlayoffError):
    """A result arrived out of game-number order or conflicts with a recorded one."""


class InvalidStateError(SequenceError):
    """A result was submitted to a series or tournament that is already finished."""


class InvalidResultError(PlayoffError, ValueError):
    """Scores are negative or tied."""


class PrerequisiteError(PlayoffError):
    """An operation was attempted before the games it depends on were final."""


class NotFoundError(PlayoffError, LookupError):
    """Unknown team, series, or game identifier."""


class InitializationError(PlayoffError, ValueError):
    """Standings handed to ``initialize_playoffs`` are malformed."""
