"""Conference brackets and the tournament-wide playoff bracket.

Round 1 is seeded (1,8) (4,5) (3,6) (2,7). Each later round pairs winners of
adjacent slots, so a team from the top half of a conference bracket can only
meet a team from the bottom half in the Conference Finals. Home court always
goes to the better original seed.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from postseason.errors import InvalidStateError, NotFoundError, PrerequisiteError
from postseason.models.constants import (
    DIRECT_QUALIFIERS_PER_CONFERENCE,
    FIRST_ROUND_PAIRINGS,
    PLAYOFF_TEAMS_PER_CONFERENCE,
    Conference,
    PlayoffPhase,
    PlayoffRound,
)
from postseason.models.play_in import PlayInTournament
from postseason.models.series import PlayoffSeries, make_series_id
from postseason.models.standings import TeamStandingsRef

logger = logging.getLogger(__name__)


class ConferenceBracket(BaseModel):
    """Eight-team single-elimination bracket for one conference."""

    conference: str
    standings: list[TeamStandingsRef] = Field(default_factory=list)

    # Index 0-7 = seeds 1-8. Seeds 7 and 8 stay empty until the play-in resolves.
    seeds: list[str | None] = Field(
        default_factory=lambda: [None] * PLAYOFF_TEAMS_PER_CONFERENCE
    )

    # Bracket order: [1v8, 4v5, 3v6, 2v7]
    first_round: list[PlayoffSeries] = Field(default_factory=list)
    # [winner 1v8 | 4v5, winner 3v6 | 2v7]
    conference_semis: list[PlayoffSeries] = Field(default_factory=list)
    conference_finals: PlayoffSeries | None = None

    champion_declared: bool = False

    @property
    def conference_champion(self) -> str | None:
        return self.conference_finals.winner_team_id if self.conference_finals else None

    @property
    def current_round(self) -> PlayoffRound | None:
        """The latest round whose series have been constructed."""
        if self.conference_finals is not None:
            return PlayoffRound.CONFERENCE_FINALS
        if self.conference_semis:
            return PlayoffRound.CONFERENCE_SEMIS
        if self.first_round:
            return PlayoffRound.FIRST_ROUND
        return None

    def seed_of(self, team_id: str) -> int | None:
        for index, seeded in enumerate(self.seeds):
            if seeded == team_id:
                return index + 1
        return None

    def standing_for(self, team_id: str) -> TeamStandingsRef | None:
        return next((s for s in self.standings if s.team_id == team_id), None)

    # --- Setup ---

    def initialize(self, standings: list[TeamStandingsRef]) -> None:
        """Seat the direct qualifiers (seeds 1-6) from standings ordered by seed."""
        self.standings = list(standings)
        self.seeds = [None] * PLAYOFF_TEAMS_PER_CONFERENCE
        for index in range(DIRECT_QUALIFIERS_PER_CONFERENCE):
            self.seeds[index] = standings[index].team_id

    def set_play_in_results(self, seed7_team_id: str, seed8_team_id: str) -> None:
        """Fill seeds 7 and 8 and build the first round. Repeats are a no-op."""
        if self.first_round:
            if (self.seeds[6], self.seeds[7]) != (seed7_team_id, seed8_team_id):
                raise InvalidStateError(f"{self.conference} first round is already seeded")
            return
        self.seeds[6] = seed7_team_id
        self.seeds[7] = seed8_team_id
        self._setup_first_round()

    def _setup_first_round(self) -> None:
        self.first_round = [
            self._create_series(high, low, PlayoffRound.FIRST_ROUND)
            for high, low in FIRST_ROUND_PAIRINGS
        ]
        logger.info(
            "first_round_seeded conference=%s matchups=%s",
            self.conference,
            [s.series_id for s in self.first_round],
        )

    def _create_series(self, higher_seed: int, lower_seed: int, round_: PlayoffRound) -> PlayoffSeries:
        higher_team = self.seeds[higher_seed - 1]
        lower_team = self.seeds[lower_seed - 1]
        if not higher_team or not lower_team:
            raise PrerequisiteError(
                f"{self.conference} seeds {higher_seed}/{lower_seed} are not filled yet"
            )
        return PlayoffSeries(
            series_id=make_series_id(self.conference, round_, higher_seed, lower_seed),
            round=round_,
            conference=self.conference,
            higher_seed=higher_seed,
            lower_seed=lower_seed,
            higher_seed_team_id=higher_team,
            lower_seed_team_id=lower_team,
        )

    def _series_from_winners(
        self, first: PlayoffSeries, second: PlayoffSeries, round_: PlayoffRound
    ) -> PlayoffSeries:
        a_team, a_seed = first.winner_team_id, first.winner_seed
        b_team, b_seed = second.winner_team_id, second.winner_seed
        if a_team is None or b_team is None or a_seed is None or b_seed is None:
            raise PrerequisiteError(f"{self.conference} {round_.value} feeders are not decided")
        if b_seed < a_seed:
            a_team, a_seed, b_team, b_seed = b_team, b_seed, a_team, a_seed
        return PlayoffSeries(
            series_id=make_series_id(self.conference, round_, a_seed, b_seed),
            round=round_,
            conference=self.conference,
            higher_seed=a_seed,
            lower_seed=b_seed,
            higher_seed_team_id=a_team,
            lower_seed_team_id=b_team,
        )

    # --- Progression ---

    def is_round_complete(self, round_: PlayoffRound) -> bool:
        if round_ == PlayoffRound.FIRST_ROUND:
            return len(self.first_round) == 4 and all(s.is_complete for s in self.first_round)
        if round_ == PlayoffRound.CONFERENCE_SEMIS:
            return len(self.conference_semis) == 2 and all(
                s.is_complete for s in self.conference_semis
            )
        if round_ == PlayoffRound.CONFERENCE_FINALS:
            return self.conference_finals is not None and self.conference_finals.is_complete
        return False

    def try_advance_round(self) -> PlayoffRound | None:
        """Move the conference forward once its current round is decided.

        Returns the round the conference advanced into: the semis or the
        conference finals when those series are built, or ``FINALS`` the one
        time the conference champion is determined. Returns None (and changes
        nothing) when the current round is still being played or the
        conference has already sent its champion on.
        """
        current = self.current_round
        if current is None or not self.is_round_complete(current):
            return None

        if current == PlayoffRound.FIRST_ROUND:
            self.conference_semis = [
                self._series_from_winners(
                    self.first_round[0], self.first_round[1], PlayoffRound.CONFERENCE_SEMIS
                ),
                self._series_from_winners(
                    self.first_round[2], self.first_round[3], PlayoffRound.CONFERENCE_SEMIS
                ),
            ]
            logger.info("conference_semis_seeded conference=%s", self.conference)
            return PlayoffRound.CONFERENCE_SEMIS

        if current == PlayoffRound.CONFERENCE_SEMIS:
            self.conference_finals = self._series_from_winners(
                self.conference_semis[0],
                self.conference_semis[1],
                PlayoffRound.CONFERENCE_FINALS,
            )
            logger.info("conference_finals_seeded conference=%s", self.conference)
            return PlayoffRound.CONFERENCE_FINALS

        if self.champion_declared:
            return None
        self.champion_declared = True
        logger.info(
            "conference_champion_determined conference=%s team=%s",
            self.conference,
            self.conference_champion,
        )
        return PlayoffRound.FINALS

    # --- Queries ---

    def all_series(self) -> list[PlayoffSeries]:
        series = list(self.first_round) + list(self.conference_semis)
        if self.conference_finals is not None:
            series.append(self.conference_finals)
        return series

    def get_active_series(self) -> list[PlayoffSeries]:
        return [s for s in self.all_series() if not s.is_complete]

    def find_series(self, series_id: str) -> PlayoffSeries | None:
        return next((s for s in self.all_series() if s.series_id == series_id), None)

    def get_team_total_wins(self, team_id: str) -> int:
        return sum(s.get_team_wins(team_id) for s in self.all_series())


class PlayoffBracket(BaseModel):
    """Aggregate root: play-in, both conference brackets, and the Finals.

    Mutated as results arrive; read-only history once ``current_phase`` is
    ``COMPLETE``.
    """

    season: int
    current_phase: PlayoffPhase = PlayoffPhase.NOT_STARTED
    play_in: PlayInTournament
    eastern: ConferenceBracket
    western: ConferenceBracket
    finals: PlayoffSeries | None = None
    champion_team_id: str | None = None
    finals_runner_up_team_id: str | None = None

    @classmethod
    def create(cls, season: int) -> PlayoffBracket:
        return cls(
            season=season,
            play_in=PlayInTournament.create(season),
            eastern=ConferenceBracket(conference=Conference.EASTERN.value),
            western=ConferenceBracket(conference=Conference.WESTERN.value),
        )

    @property
    def is_complete(self) -> bool:
        return self.current_phase == PlayoffPhase.COMPLETE

    @property
    def conferences(self) -> list[ConferenceBracket]:
        return [self.eastern, self.western]

    def conference(self, name: str) -> ConferenceBracket:
        for bracket in self.conferences:
            if bracket.conference == name:
                return bracket
        raise NotFoundError(f"Unknown conference {name}")

    def all_series(self) -> list[PlayoffSeries]:
        series = self.eastern.all_series() + self.western.all_series()
        if self.finals is not None:
            series.append(self.finals)
        return series

    def get_active_series(self) -> list[PlayoffSeries]:
        return [s for s in self.all_series() if not s.is_complete]

    def find_series(self, series_id: str) -> PlayoffSeries | None:
        return next((s for s in self.all_series() if s.series_id == series_id), None)

    def standing_for(self, team_id: str) -> TeamStandingsRef | None:
        for bracket in self.conferences:
            standing = bracket.standing_for(team_id)
            if standing is not None:
                return standing
        return None

    def try_advance_round(self) -> bool:
        """Advance the tournament phase one step if the current stage is decided.

        Both conferences move in lockstep: the next round is only built once
        the current round is complete in *both*. Returns True if the phase
        changed; calling it again with nothing new decided is a no-op.
        """
        phase = self.current_phase

        if phase == PlayoffPhase.PLAY_IN:
            if not self.play_in.is_complete:
                return False
            for bracket, play_in in (
                (self.eastern, self.play_in.east),
                (self.western, self.play_in.west),
            ):
                if play_in.seven_seed_team_id and play_in.eight_seed_team_id:
                    bracket.set_play_in_results(
                        play_in.seven_seed_team_id, play_in.eight_seed_team_id
                    )
            self.current_phase = PlayoffPhase.FIRST_ROUND
            return True

        if phase in (PlayoffPhase.FIRST_ROUND, PlayoffPhase.CONFERENCE_SEMIS):
            round_ = (
                PlayoffRound.FIRST_ROUND
                if phase == PlayoffPhase.FIRST_ROUND
                else PlayoffRound.CONFERENCE_SEMIS
            )
            if not all(b.is_round_complete(round_) for b in self.conferences):
                return False
            for bracket in self.conferences:
                bracket.try_advance_round()
            self.current_phase = (
                PlayoffPhase.CONFERENCE_SEMIS
                if phase == PlayoffPhase.FIRST_ROUND
                else PlayoffPhase.CONFERENCE_FINALS
            )
            return True

        if phase == PlayoffPhase.CONFERENCE_FINALS:
            if not all(b.is_round_complete(PlayoffRound.CONFERENCE_FINALS) for b in self.conferences):
                return False
            for bracket in self.conferences:
                bracket.try_advance_round()
            self._setup_finals()
            self.current_phase = PlayoffPhase.FINALS
            return True

        if phase == PlayoffPhase.FINALS:
            if self.finals is None or not self.finals.is_complete:
                return False
            self.champion_team_id = self.finals.winner_team_id
            self.finals_runner_up_team_id = self.finals.loser_team_id
            self.current_phase = PlayoffPhase.COMPLETE
            return True

        return False

    def _finals_home_court_key(self, team_id: str, conference: ConferenceBracket) -> tuple:
        standing = conference.standing_for(team_id)
        win_pct = standing.win_pct if standing else 0.0
        wins = standing.wins if standing else 0
        seed = conference.seed_of(team_id) or 99
        return (win_pct, wins, -seed)

    def _setup_finals(self) -> None:
        east_champ = self.eastern.conference_champion
        west_champ = self.western.conference_champion
        if east_champ is None or west_champ is None:
            raise PrerequisiteError("Finals need both conference champions")

        # Better regular-season record hosts; a dead heat goes to the East.
        east_key = self._finals_home_court_key(east_champ, self.eastern)
        west_key = self._finals_home_court_key(west_champ, self.western)
        east_home = east_key >= west_key

        home_team, home_conf = (east_champ, self.eastern) if east_home else (west_champ, self.western)
        road_team, road_conf = (west_champ, self.western) if east_home else (east_champ, self.eastern)

        self.finals = PlayoffSeries(
            series_id=f"FINALS_{self.season}",
            round=PlayoffRound.FINALS,
            conference="Finals",
            higher_seed=home_conf.seed_of(home_team) or 1,
            lower_seed=road_conf.seed_of(road_team) or 1,
            higher_seed_team_id=home_team,
            lower_seed_team_id=road_team,
        )
        logger.info(
            "finals_seeded season=%d home_court=%s opponent=%s",
            self.season,
            home_team,
            road_team,
        )
