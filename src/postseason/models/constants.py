"""Shared constants and enums for the postseason models.

Placed here so the models, the controller, and the API layer can import
them without creating a layer violation.
"""

from __future__ import annotations

from enum import StrEnum


class Conference(StrEnum):
    """The two conferences. Values double as the id prefix for series and games."""

    EASTERN = "Eastern"
    WESTERN = "Western"


class PlayoffPhase(StrEnum):
    """Tournament-wide phase, in the order the bracket moves through them."""

    NOT_STARTED = "not_started"
    PLAY_IN = "play_in"
    FIRST_ROUND = "first_round"
    CONFERENCE_SEMIS = "conference_semis"
    CONFERENCE_FINALS = "conference_finals"
    FINALS = "finals"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        return list(PlayoffPhase).index(self)


class PlayoffRound(StrEnum):
    """Round a series (or play-in game) belongs to."""

    PLAY_IN = "play_in"
    FIRST_ROUND = "first_round"
    CONFERENCE_SEMIS = "conference_semis"
    CONFERENCE_FINALS = "conference_finals"
    FINALS = "finals"

    @property
    def number(self) -> int:
        """Numeric round used by calendar entries (play-in = 0, finals = 4)."""
        return list(PlayoffRound).index(self)

    @property
    def label(self) -> str:
        return _ROUND_LABELS[self]


_ROUND_LABELS: dict[PlayoffRound, str] = {
    PlayoffRound.PLAY_IN: "Play-In",
    PlayoffRound.FIRST_ROUND: "First Round",
    PlayoffRound.CONFERENCE_SEMIS: "Conf. Semifinals",
    PlayoffRound.CONFERENCE_FINALS: "Conference Finals",
    PlayoffRound.FINALS: "NBA Finals",
}

# Best-of-seven.
WINS_TO_CLINCH = 4
MAX_SERIES_GAMES = 7

# 2-2-1-1-1: True where the higher seed hosts (games 1, 2, 5, 7).
HOME_COURT_PATTERN: tuple[bool, ...] = (True, True, False, False, True, False, True)

PLAYOFF_TEAMS_PER_CONFERENCE = 8
DIRECT_QUALIFIERS_PER_CONFERENCE = 6
PLAY_IN_FIELD_SIZE = 10

# Round-1 pairings by seed, in bracket order: the first two feed one semifinal,
# the last two feed the other.
FIRST_ROUND_PAIRINGS: list[tuple[int, int]] = [(1, 8), (4, 5), (3, 6), (2, 7)]
