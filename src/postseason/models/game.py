"""Game result records for the postseason.

PlayoffGame is one game of a best-of-seven series; PlayInGame is one game of a
conference play-in bracket. Both only *consume* final scores — the engine
that produces them lives outside this package.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, Field

from postseason.errors import InvalidResultError, InvalidStateError, PrerequisiteError
from postseason.models.constants import PlayoffRound


def validate_scores(first: int, second: int) -> None:
    """Reject negative or tied final scores."""
    if first < 0 or second < 0:
        raise InvalidResultError(f"Scores must be non-negative, got {first}-{second}")
    if first == second:
        raise InvalidResultError(f"Playoff games cannot end tied ({first}-{second})")


def make_game_id(series_id: str, game_number: int) -> str:
    return f"{series_id}_G{game_number}"


class PlayoffGame(BaseModel):
    """A single game of a playoff series.

    Once ``is_complete`` is set the scores are frozen; the winner is always
    derived from them and never stored separately.
    """

    game_id: str = ""
    series_id: str = ""
    round: PlayoffRound = PlayoffRound.FIRST_ROUND
    game_number: int = Field(ge=1, le=7)
    date: dt.date | None = None
    home_team_id: str
    away_team_id: str
    home_score: int = 0
    away_score: int = 0
    is_complete: bool = False
    was_overtime: bool = False
    overtime_periods: int = Field(default=0, ge=0)

    @property
    def winner_team_id(self) -> str | None:
        if not self.is_complete:
            return None
        return self.home_team_id if self.home_score > self.away_score else self.away_team_id

    @property
    def loser_team_id(self) -> str | None:
        if not self.is_complete:
            return None
        return self.away_team_id if self.home_score > self.away_score else self.home_team_id

    @property
    def margin(self) -> int:
        return abs(self.home_score - self.away_score)

    def matches(self, home_score: int, away_score: int) -> bool:
        """True if this game is already final with exactly these scores."""
        return (
            self.is_complete
            and self.home_score == home_score
            and self.away_score == away_score
        )

    def record_result(
        self,
        home_score: int,
        away_score: int,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> None:
        if self.is_complete:
            raise InvalidStateError(f"Game {self.game_id or self.game_number} is already final")
        validate_scores(home_score, away_score)
        if overtime_periods < 0:
            raise InvalidResultError("overtime_periods cannot be negative")
        self.home_score = home_score
        self.away_score = away_score
        self.was_overtime = was_overtime or overtime_periods > 0
        self.overtime_periods = overtime_periods
        self.is_complete = True


class PlayInGameType(StrEnum):
    """Which play-in game this is."""

    SEVEN_VS_EIGHT = "seven_vs_eight"  # winner = 7 seed, loser to the decider
    NINE_VS_TEN = "nine_vs_ten"  # winner to the decider, loser eliminated
    EIGHT_SEED_DECIDER = "eight_seed_decider"  # winner = 8 seed, loser eliminated


PLAY_IN_GAME_CODES: dict[PlayInGameType, str] = {
    PlayInGameType.SEVEN_VS_EIGHT: "78",
    PlayInGameType.NINE_VS_TEN: "910",
    PlayInGameType.EIGHT_SEED_DECIDER: "8SEED",
}


def make_play_in_game_id(conference: str, game_type: PlayInGameType) -> str:
    return f"PLAYIN_{conference}_{PLAY_IN_GAME_CODES[game_type]}"


class PlayInGame(BaseModel):
    """A single play-in game. The higher seed hosts.

    ``winner_team_id``/``loser_team_id`` are written exactly once, when the
    result is recorded.
    """

    game_id: str
    conference: str
    game_type: PlayInGameType
    higher_seed: int = 0
    lower_seed: int = 0
    higher_seed_team_id: str | None = None
    lower_seed_team_id: str | None = None
    higher_seed_score: int = 0
    lower_seed_score: int = 0
    is_complete: bool = False
    winner_team_id: str | None = None
    loser_team_id: str | None = None
    date: dt.date | None = None
    was_overtime: bool = False
    overtime_periods: int = Field(default=0, ge=0)

    @property
    def home_team_id(self) -> str | None:
        return self.higher_seed_team_id

    @property
    def away_team_id(self) -> str | None:
        return self.lower_seed_team_id

    @property
    def has_participants(self) -> bool:
        return bool(self.higher_seed_team_id and self.lower_seed_team_id)

    @property
    def eliminates_loser(self) -> bool:
        """The 9v10 game and the decider end the loser's season; 7v8 does not."""
        return self.game_type != PlayInGameType.SEVEN_VS_EIGHT

    def involves(self, team_id: str) -> bool:
        return team_id in (self.higher_seed_team_id, self.lower_seed_team_id)

    def matches(self, higher_seed_score: int, lower_seed_score: int) -> bool:
        return (
            self.is_complete
            and self.higher_seed_score == higher_seed_score
            and self.lower_seed_score == lower_seed_score
        )

    def record_result(
        self,
        higher_seed_score: int,
        lower_seed_score: int,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> None:
        if self.is_complete:
            raise InvalidStateError(f"Play-in game {self.game_id} is already final")
        if not self.has_participants:
            raise PrerequisiteError(f"Play-in game {self.game_id} has no opponents yet")
        validate_scores(higher_seed_score, lower_seed_score)
        if overtime_periods < 0:
            raise InvalidResultError("overtime_periods cannot be negative")

        higher_won = higher_seed_score > lower_seed_score
        self.higher_seed_score = higher_seed_score
        self.lower_seed_score = lower_seed_score
        self.winner_team_id = self.higher_seed_team_id if higher_won else self.lower_seed_team_id
        self.loser_team_id = self.lower_seed_team_id if higher_won else self.higher_seed_team_id
        self.was_overtime = was_overtime or overtime_periods > 0
        self.overtime_periods = overtime_periods
        self.is_complete = True
