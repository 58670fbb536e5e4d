"""Play-in tournament — the mini-bracket that settles seeds 7 and 8.

Per conference:
    Game 1: #7 vs #8   -> winner is the 7 seed, loser drops to the decider
    Game 2: #9 vs #10  -> winner plays the decider, loser is eliminated
    Game 3: loser G1 vs winner G2 -> winner is the 8 seed, loser is eliminated

Games 1 and 2 have no ordering between them. The decider only comes into
existence through ``create_eight_seed_game()``, which refuses until both
feeders are final; recording a result never creates a game on its own.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from postseason.errors import InitializationError, NotFoundError, PrerequisiteError
from postseason.models.constants import PLAY_IN_FIELD_SIZE, Conference
from postseason.models.game import PlayInGame, PlayInGameType, make_play_in_game_id
from postseason.models.standings import TeamStandingsRef

logger = logging.getLogger(__name__)


class ConferencePlayInBracket(BaseModel):
    """Play-in bracket for a single conference."""

    conference: str

    # Regular-season seeds 7-10
    seed7_team_id: str | None = None
    seed8_team_id: str | None = None
    seed9_team_id: str | None = None
    seed10_team_id: str | None = None

    seven_vs_eight: PlayInGame | None = None
    nine_vs_ten: PlayInGame | None = None
    eight_seed_game: PlayInGame | None = None

    # Outputs fed to the conference bracket
    seven_seed_team_id: str | None = None
    eight_seed_team_id: str | None = None

    # Set when the play-in was bypassed and seeds 7/8 came straight from standings
    skipped: bool = False

    @property
    def is_complete(self) -> bool:
        return bool(self.seven_seed_team_id and self.eight_seed_team_id)

    @property
    def has_started(self) -> bool:
        return any(g.is_complete for g in self.games())

    @property
    def is_eight_seed_game_ready(self) -> bool:
        return bool(
            self.seven_vs_eight
            and self.seven_vs_eight.is_complete
            and self.nine_vs_ten
            and self.nine_vs_ten.is_complete
        )

    @property
    def participant_ids(self) -> list[str]:
        seeds = [self.seed7_team_id, self.seed8_team_id, self.seed9_team_id, self.seed10_team_id]
        return [t for t in seeds if t]

    @property
    def eliminated_team_ids(self) -> list[str]:
        """Teams whose season ended in the play-in (not the 7v8 loser)."""
        if self.skipped:
            return [t for t in (self.seed9_team_id, self.seed10_team_id) if t]
        eliminated: list[str] = []
        for game in (self.nine_vs_ten, self.eight_seed_game):
            if game and game.is_complete and game.loser_team_id:
                eliminated.append(game.loser_team_id)
        return eliminated

    def games(self) -> list[PlayInGame]:
        return [g for g in (self.seven_vs_eight, self.nine_vs_ten, self.eight_seed_game) if g]

    def seed_of(self, team_id: str) -> int | None:
        seeds = {
            self.seed7_team_id: 7,
            self.seed8_team_id: 8,
            self.seed9_team_id: 9,
            self.seed10_team_id: 10,
        }
        return seeds.get(team_id)

    def find_game(self, game_id: str) -> PlayInGame | None:
        return next((g for g in self.games() if g.game_id == game_id), None)

    # --- Setup ---

    def initialize(self, standings: list[TeamStandingsRef]) -> None:
        """Seat seeds 7-10 from standings ordered by seed and create games 1 and 2."""
        if len(standings) < PLAY_IN_FIELD_SIZE:
            msg = (
                f"{self.conference} play-in needs {PLAY_IN_FIELD_SIZE} teams, "
                f"got {len(standings)}"
            )
            raise InitializationError(msg)

        self.seed7_team_id = standings[6].team_id
        self.seed8_team_id = standings[7].team_id
        self.seed9_team_id = standings[8].team_id
        self.seed10_team_id = standings[9].team_id

        self.seven_vs_eight = PlayInGame(
            game_id=make_play_in_game_id(self.conference, PlayInGameType.SEVEN_VS_EIGHT),
            conference=self.conference,
            game_type=PlayInGameType.SEVEN_VS_EIGHT,
            higher_seed=7,
            lower_seed=8,
            higher_seed_team_id=self.seed7_team_id,
            lower_seed_team_id=self.seed8_team_id,
        )
        self.nine_vs_ten = PlayInGame(
            game_id=make_play_in_game_id(self.conference, PlayInGameType.NINE_VS_TEN),
            conference=self.conference,
            game_type=PlayInGameType.NINE_VS_TEN,
            higher_seed=9,
            lower_seed=10,
            higher_seed_team_id=self.seed9_team_id,
            lower_seed_team_id=self.seed10_team_id,
        )
        self.eight_seed_game = None

    def apply_direct_seeds(self, seven_seed_team_id: str, eight_seed_team_id: str) -> None:
        """Bypass the play-in: seeds 7 and 8 qualify directly, 9 and 10 are out."""
        if self.has_started:
            raise PrerequisiteError(f"{self.conference} play-in already has results recorded")
        self.seven_seed_team_id = seven_seed_team_id
        self.eight_seed_team_id = eight_seed_team_id
        self.seven_vs_eight = None
        self.nine_vs_ten = None
        self.eight_seed_game = None
        self.skipped = True

    def skip(self, standings: list[TeamStandingsRef]) -> None:
        """Re-seat seeds 7-10 from ``standings`` and bypass the play-in.

        Eight-team standings leave seeds 9 and 10 empty.
        """
        if self.has_started:
            raise PrerequisiteError(f"{self.conference} play-in already has results recorded")
        seats = [s.team_id for s in standings[6:PLAY_IN_FIELD_SIZE]]
        seats += [None] * (4 - len(seats))
        self.seed7_team_id, self.seed8_team_id, self.seed9_team_id, self.seed10_team_id = seats
        self.apply_direct_seeds(standings[6].team_id, standings[7].team_id)

    def create_eight_seed_game(self) -> PlayInGame:
        """Build the decider: loser of 7v8 hosts winner of 9v10.

        Returns the existing decider when it has already been created.
        """
        if self.eight_seed_game is not None:
            return self.eight_seed_game
        if not self.is_eight_seed_game_ready or not self.seven_vs_eight or not self.nine_vs_ten:
            raise PrerequisiteError(
                f"{self.conference} 8-seed game needs both the 7v8 and 9v10 results"
            )

        main_loser = self.seven_vs_eight.loser_team_id
        lower_winner = self.nine_vs_ten.winner_team_id
        self.eight_seed_game = PlayInGame(
            game_id=make_play_in_game_id(self.conference, PlayInGameType.EIGHT_SEED_DECIDER),
            conference=self.conference,
            game_type=PlayInGameType.EIGHT_SEED_DECIDER,
            higher_seed=self.seed_of(main_loser or "") or 0,
            lower_seed=self.seed_of(lower_winner or "") or 0,
            higher_seed_team_id=main_loser,
            lower_seed_team_id=lower_winner,
        )
        logger.info(
            "play_in_decider_created conference=%s home=%s away=%s",
            self.conference,
            main_loser,
            lower_winner,
        )
        return self.eight_seed_game

    # --- Results ---

    def record_game_result(
        self,
        game: PlayInGame | str,
        higher_seed_score: int,
        lower_seed_score: int,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> PlayInGame:
        """Record a final score and derive the seed it settles.

        ``game`` may be a game id or any PlayInGame carrying the id; the
        bracket's own copy is always the one updated.
        """
        game_id = game if isinstance(game, str) else game.game_id
        target = self.find_game(game_id)
        if target is None:
            raise NotFoundError(f"No play-in game {game_id} in {self.conference}")

        target.record_result(higher_seed_score, lower_seed_score, was_overtime, overtime_periods)

        if target.game_type == PlayInGameType.SEVEN_VS_EIGHT:
            self.seven_seed_team_id = target.winner_team_id
        elif target.game_type == PlayInGameType.EIGHT_SEED_DECIDER:
            self.eight_seed_team_id = target.winner_team_id
        return target

    # --- Queries ---

    def get_pending_games(self) -> list[PlayInGame]:
        """Existing games still to be played (the decider only once created)."""
        return [g for g in self.games() if not g.is_complete and g.has_participants]

    def get_next_game(self) -> PlayInGame | None:
        pending = self.get_pending_games()
        return pending[0] if pending else None


class PlayInTournament(BaseModel):
    """Play-in brackets for both conferences."""

    season: int
    east: ConferencePlayInBracket
    west: ConferencePlayInBracket

    @classmethod
    def create(cls, season: int) -> PlayInTournament:
        return cls(
            season=season,
            east=ConferencePlayInBracket(conference=Conference.EASTERN.value),
            west=ConferencePlayInBracket(conference=Conference.WESTERN.value),
        )

    @property
    def is_complete(self) -> bool:
        return self.east.is_complete and self.west.is_complete

    @property
    def has_started(self) -> bool:
        return self.east.has_started or self.west.has_started

    @property
    def brackets(self) -> list[ConferencePlayInBracket]:
        return [self.east, self.west]

    @property
    def eliminated_team_ids(self) -> list[str]:
        return self.east.eliminated_team_ids + self.west.eliminated_team_ids

    def initialize(
        self,
        east_standings: list[TeamStandingsRef],
        west_standings: list[TeamStandingsRef],
    ) -> None:
        self.east.initialize(east_standings)
        self.west.initialize(west_standings)

    def bracket_for(self, conference: str) -> ConferencePlayInBracket:
        for bracket in self.brackets:
            if bracket.conference == conference:
                return bracket
        raise NotFoundError(f"Unknown conference {conference}")

    def find_game(self, game_id: str) -> tuple[ConferencePlayInBracket, PlayInGame] | None:
        for bracket in self.brackets:
            game = bracket.find_game(game_id)
            if game is not None:
                return bracket, game
        return None

    def get_pending_games(self) -> list[PlayInGame]:
        return self.east.get_pending_games() + self.west.get_pending_games()

    def get_next_game(self) -> PlayInGame | None:
        return self.east.get_next_game() or self.west.get_next_game()
