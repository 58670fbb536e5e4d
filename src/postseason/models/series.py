"""Best-of-seven playoff series.

Win counters move only through ``record_game_result`` — one increment per
completed game — so ``higher_seed_wins + lower_seed_wins`` always equals the
number of completed games. The validator re-checks that invariant whenever a
series is constructed, which includes restoring one from a snapshot.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from pydantic import BaseModel, Field, model_validator

from postseason.errors import InvalidStateError, SequenceError
from postseason.models.constants import (
    HOME_COURT_PATTERN,
    MAX_SERIES_GAMES,
    WINS_TO_CLINCH,
    PlayoffRound,
)
from postseason.models.game import PlayoffGame, make_game_id, validate_scores

logger = logging.getLogger(__name__)

NameResolver = Callable[[str], str | None]


def make_series_id(conference: str, round_: PlayoffRound, higher_seed: int, lower_seed: int) -> str:
    return f"{conference}_{round_.value}_{higher_seed}v{lower_seed}"


class PlayoffSeries(BaseModel):
    """A best-of-seven series between two seeded teams.

    The higher seed holds home court: it hosts games 1, 2, 5 and 7.

    In the Finals the "higher seed" slot holds the home-court team, picked on
    regular-season record, and both seed numbers are conference seeds. The
    home-court team can therefore carry the larger seed number.
    """

    series_id: str
    round: PlayoffRound
    conference: str
    higher_seed: int
    lower_seed: int
    higher_seed_team_id: str
    lower_seed_team_id: str
    higher_seed_wins: int = Field(default=0, ge=0, le=WINS_TO_CLINCH)
    lower_seed_wins: int = Field(default=0, ge=0, le=WINS_TO_CLINCH)
    games: list[PlayoffGame] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_win_counts(self) -> PlayoffSeries:
        completed = [g for g in self.games if g.is_complete]
        if self.higher_seed_wins + self.lower_seed_wins != len(completed):
            msg = (
                f"Series {self.series_id}: wins {self.higher_seed_wins}+{self.lower_seed_wins} "
                f"do not match {len(completed)} completed games"
            )
            raise ValueError(msg)
        if self.higher_seed_wins == WINS_TO_CLINCH and self.lower_seed_wins == WINS_TO_CLINCH:
            raise ValueError(f"Series {self.series_id}: both sides cannot reach 4 wins")
        if len(self.games) > MAX_SERIES_GAMES:
            raise ValueError(f"Series {self.series_id}: more than {MAX_SERIES_GAMES} games")
        higher = sum(1 for g in completed if g.winner_team_id == self.higher_seed_team_id)
        if higher != self.higher_seed_wins:
            raise ValueError(f"Series {self.series_id}: win counts disagree with game results")
        return self

    # --- Derived state ---

    @property
    def is_complete(self) -> bool:
        return WINS_TO_CLINCH in (self.higher_seed_wins, self.lower_seed_wins)

    @property
    def winner_team_id(self) -> str | None:
        if self.higher_seed_wins == WINS_TO_CLINCH:
            return self.higher_seed_team_id
        if self.lower_seed_wins == WINS_TO_CLINCH:
            return self.lower_seed_team_id
        return None

    @property
    def loser_team_id(self) -> str | None:
        if self.higher_seed_wins == WINS_TO_CLINCH:
            return self.lower_seed_team_id
        if self.lower_seed_wins == WINS_TO_CLINCH:
            return self.higher_seed_team_id
        return None

    @property
    def winner_seed(self) -> int | None:
        if self.higher_seed_wins == WINS_TO_CLINCH:
            return self.higher_seed
        if self.lower_seed_wins == WINS_TO_CLINCH:
            return self.lower_seed
        return None

    @property
    def total_games_played(self) -> int:
        return self.higher_seed_wins + self.lower_seed_wins

    @property
    def next_game_number(self) -> int:
        return self.total_games_played + 1

    @property
    def record(self) -> str:
        """Series score from the higher seed's side, e.g. ``"3-1"``."""
        return f"{self.higher_seed_wins}-{self.lower_seed_wins}"

    @property
    def pending_game(self) -> PlayoffGame | None:
        """The scheduled but unplayed next game, if the calendar created one."""
        return next((g for g in self.games if not g.is_complete), None)

    def involves(self, team_id: str) -> bool:
        return team_id in (self.higher_seed_team_id, self.lower_seed_team_id)

    def get_game(self, game_number: int) -> PlayoffGame | None:
        return next((g for g in self.games if g.game_number == game_number), None)

    def get_team_wins(self, team_id: str) -> int:
        if team_id == self.higher_seed_team_id:
            return self.higher_seed_wins
        if team_id == self.lower_seed_team_id:
            return self.lower_seed_wins
        return 0

    def is_elimination_game(self) -> bool:
        """True when the trailing side already has 3 wins, so the next loss ends it."""
        return not self.is_complete and min(self.higher_seed_wins, self.lower_seed_wins) == 3

    def is_game_seven(self) -> bool:
        return self.higher_seed_wins == 3 and self.lower_seed_wins == 3

    def is_closeout_game(self) -> bool:
        """True when either side can clinch with its next win."""
        return not self.is_complete and max(self.higher_seed_wins, self.lower_seed_wins) == 3

    # --- Home court ---

    def home_team_for_game(self, game_number: int) -> str:
        if game_number < 1 or game_number > MAX_SERIES_GAMES:
            return self.higher_seed_team_id
        if HOME_COURT_PATTERN[game_number - 1]:
            return self.higher_seed_team_id
        return self.lower_seed_team_id

    def _new_game(self, game_number: int, date: dt.date | None = None) -> PlayoffGame:
        home = self.home_team_for_game(game_number)
        away = self.lower_seed_team_id if home == self.higher_seed_team_id else self.higher_seed_team_id
        return PlayoffGame(
            game_id=make_game_id(self.series_id, game_number),
            series_id=self.series_id,
            round=self.round,
            game_number=game_number,
            date=date,
            home_team_id=home,
            away_team_id=away,
        )

    # --- Mutation ---

    def create_next_game(self, date: dt.date | None = None) -> PlayoffGame | None:
        """Schedule the next game. Returns None once the series is decided.

        Calling it again before the game is played returns the same pending
        game (re-dated when a new date is given) rather than adding another.
        """
        if self.is_complete:
            return None
        pending = self.get_game(self.next_game_number)
        if pending is not None:
            if date is not None:
                pending.date = date
            return pending
        game = self._new_game(self.next_game_number, date)
        self.games.append(game)
        return game

    def record_game_result(
        self,
        game_number: int,
        home_score: int,
        away_score: int,
        *,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> PlayoffGame:
        """Record a final score for ``game_number`` and credit the winner.

        Raises:
            InvalidStateError: the series is already decided.
            SequenceError: ``game_number`` is not ``next_game_number``.
            InvalidResultError: negative or tied scores.
        """
        if self.is_complete:
            raise InvalidStateError(f"Series {self.series_id} is already complete ({self.record})")
        if game_number != self.next_game_number:
            msg = (
                f"Series {self.series_id}: expected game {self.next_game_number}, "
                f"got game {game_number}"
            )
            raise SequenceError(msg)
        validate_scores(home_score, away_score)

        game = self.get_game(game_number)
        is_new = game is None
        if game is None:
            game = self._new_game(game_number)
        game.record_result(home_score, away_score, was_overtime, overtime_periods)
        if is_new:
            self.games.append(game)

        if game.winner_team_id == self.higher_seed_team_id:
            self.higher_seed_wins += 1
        else:
            self.lower_seed_wins += 1

        logger.debug(
            "series_game_recorded series=%s game=%d score=%d-%d record=%s",
            self.series_id,
            game_number,
            home_score,
            away_score,
            self.record,
        )
        return game

    # --- Presentation helper ---

    def get_status_string(self, name_resolver: NameResolver | None = None) -> str:
        """Human-readable series state, e.g. ``"BOS leads 3-1"``.

        ``name_resolver`` maps a team id to a display name; ids are used when
        it is missing or returns None.
        """

        def _name(team_id: str) -> str:
            if name_resolver is None:
                return team_id
            return name_resolver(team_id) or team_id

        higher = _name(self.higher_seed_team_id)
        lower = _name(self.lower_seed_team_id)
        h, lo = self.higher_seed_wins, self.lower_seed_wins

        if h == WINS_TO_CLINCH:
            return f"{higher} wins {h}-{lo}"
        if lo == WINS_TO_CLINCH:
            return f"{lower} wins {lo}-{h}"
        if h > lo:
            return f"{higher} leads {h}-{lo}"
        if lo > h:
            return f"{lower} leads {lo}-{h}"
        return f"Series tied {h}-{lo}"
