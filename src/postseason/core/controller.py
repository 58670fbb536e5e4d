"""Postseason controller — the one owner of the active PlayoffBracket.

Drives the tournament through its phases:
    NOT_STARTED -> PLAY_IN -> FIRST_ROUND -> CONFERENCE_SEMIS
        -> CONFERENCE_FINALS -> FINALS -> COMPLETE

Phases only move when results complete a stage; the single exception is
``skip_play_in`` for leagues that run without a play-in.

Every recording call is validated in full before anything is mutated, then
applied together with its cascade (series complete -> conference champion /
champion -> round advance). Lifecycle events are collected during the cascade
and published afterwards, in emission order, so subscribers always see a
consistent bracket.

Late, duplicate, or unknown-id calls from the simulation loop never raise:
they are logged and reported through ``RecordOutcome``. Only malformed
standings (``InitializationError``) propagate to the caller.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from postseason.config import Settings
from postseason.core.calendar import ScheduledGame, schedule_play_in_games, schedule_series_games
from postseason.core.codec import PlayoffSaveData, load_snapshot
from postseason.core.seeding import validate_league
from postseason.errors import (
    InvalidResultError,
    InvalidStateError,
    NotFoundError,
    PlayoffError,
    PrerequisiteError,
    SequenceError,
)
from postseason.models.bracket import PlayoffBracket
from postseason.models.constants import PLAY_IN_FIELD_SIZE, PlayoffPhase, PlayoffRound
from postseason.models.game import PlayInGame, validate_scores
from postseason.models.play_in import ConferencePlayInBracket
from postseason.models.series import NameResolver, PlayoffSeries
from postseason.models.standings import TeamStandingsRef

if TYPE_CHECKING:
    from postseason.core.event_bus import EventBus
    from postseason.models.game import PlayoffGame

logger = logging.getLogger(__name__)

DeferredEvent = tuple[str, dict[str, Any]]


@dataclass
class RecordOutcome:
    """What a recording call did.

    ``applied`` is False for rejected calls *and* for idempotent re-deliveries
    of a result that is already on record; only the former carry an error.
    """

    applied: bool
    error: str | None = None
    error_type: str | None = None
    phase_changed: bool = False
    events: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": self.applied,
            "error": self.error,
            "error_type": self.error_type,
            "phase_changed": self.phase_changed,
            "events": list(self.events),
        }


class PlayoffController:
    """Owns one season's PlayoffBracket and is the only code that mutates it.

    Constructed explicitly and handed its collaborators; its lifetime is
    managed by the season simulation loop.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        settings: Settings | None = None,
        name_resolver: NameResolver | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._settings = settings or Settings()
        self._name_resolver = name_resolver
        self._bracket: PlayoffBracket | None = None
        self._season = 0
        self._is_active = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    @property
    def bracket(self) -> PlayoffBracket | None:
        return self._bracket

    @property
    def season(self) -> int:
        return self._season

    @property
    def current_phase(self) -> PlayoffPhase:
        return self._bracket.current_phase if self._bracket else PlayoffPhase.NOT_STARTED

    @property
    def is_playoffs_active(self) -> bool:
        return self._is_active

    def _publish(self, events: list[DeferredEvent]) -> None:
        if not self._event_bus:
            return
        for event_type, data in events:
            self._event_bus.publish(event_type, data)

    def _reject(self, exc: PlayoffError, action: str) -> RecordOutcome:
        # Unknown ids are routine for a loop replaying stale references.
        level = logging.DEBUG if isinstance(exc, NotFoundError) else logging.WARNING
        logger.log(level, "%s_rejected error=%s detail=%s", action, type(exc).__name__, exc)
        return RecordOutcome(applied=False, error=str(exc), error_type=type(exc).__name__)

    def _phase_event(self, from_phase: PlayoffPhase, to_phase: PlayoffPhase) -> DeferredEvent:
        logger.info(
            "playoff_phase_changed season=%d from=%s to=%s",
            self._season,
            from_phase.value,
            to_phase.value,
        )
        return (
            "playoffs.phase_changed",
            {"season": self._season, "from_phase": from_phase.value, "to_phase": to_phase.value},
        )

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize_playoffs(
        self,
        season: int,
        east_standings: list[TeamStandingsRef],
        west_standings: list[TeamStandingsRef],
    ) -> PlayoffBracket:
        """Build a fresh bracket for ``season`` and open the play-in.

        With ``postseason_play_in_enabled`` off, the play-in is skipped
        immediately and the bracket opens in the first round.

        Raises:
            InitializationError: standings are incomplete or inconsistent.
        """
        play_in_enabled = self._settings.postseason_play_in_enabled
        try:
            east, west = validate_league(
                east_standings, west_standings, require_play_in=play_in_enabled
            )
        except PlayoffError:
            logger.exception("playoffs_initialization_failed season=%d", season)
            raise

        if self._bracket is not None and self._is_active and not self._bracket.is_complete:
            logger.warning(
                "replacing_unfinished_bracket old_season=%d phase=%s",
                self._season,
                self._bracket.current_phase.value,
            )

        bracket = PlayoffBracket.create(season)
        if len(east) >= PLAY_IN_FIELD_SIZE and len(west) >= PLAY_IN_FIELD_SIZE:
            bracket.play_in.initialize(east, west)
        bracket.eastern.initialize(east)
        bracket.western.initialize(west)
        bracket.current_phase = PlayoffPhase.PLAY_IN

        self._bracket = bracket
        self._season = season
        self._is_active = True

        logger.info("playoffs_initialized season=%d", season)
        for play_in in bracket.play_in.brackets:
            logger.info(
                "play_in_field conference=%s seeds_7_to_10=%s",
                play_in.conference,
                play_in.participant_ids,
            )

        self._publish([self._phase_event(PlayoffPhase.NOT_STARTED, PlayoffPhase.PLAY_IN)])

        if not play_in_enabled:
            self.skip_play_in()
        return bracket

    def skip_play_in(
        self,
        east_standings: list[TeamStandingsRef] | None = None,
        west_standings: list[TeamStandingsRef] | None = None,
    ) -> bool:
        """Seed round 1 straight from standings positions 7 and 8.

        Only allowed while in the play-in phase with no play-in result
        recorded. Defaults to the standings the bracket was initialized with;
        standings passed in re-seat both conferences. Invalid standings are
        refused like any other rejected call. Returns True if the first round
        was seeded.
        """
        bracket = self._bracket
        if bracket is None:
            logger.warning("skip_play_in_ignored reason=no_bracket")
            return False
        if bracket.current_phase != PlayoffPhase.PLAY_IN or bracket.play_in.has_started:
            self._reject(
                PrerequisiteError("Play-in can only be skipped before any play-in game is played"),
                "skip_play_in",
            )
            return False

        try:
            east, west = validate_league(
                east_standings if east_standings is not None else bracket.eastern.standings,
                west_standings if west_standings is not None else bracket.western.standings,
                require_play_in=False,
            )
        except PlayoffError as exc:
            self._reject(exc, "skip_play_in")
            return False

        # Caller standings replace the initial ones so field queries match round 1.
        for conference, play_in, standings in (
            (bracket.eastern, bracket.play_in.east, east),
            (bracket.western, bracket.play_in.west, west),
        ):
            conference.initialize(standings)
            play_in.skip(standings)

        previous = bracket.current_phase
        bracket.try_advance_round()
        logger.info("play_in_skipped season=%d", self._season)
        self._publish([self._phase_event(previous, bracket.current_phase)])
        return True

    # ------------------------------------------------------------------
    # Play-in
    # ------------------------------------------------------------------

    def _create_ready_deciders(self) -> None:
        if self._bracket is None:
            return
        for play_in in self._bracket.play_in.brackets:
            if play_in.eight_seed_game is None and play_in.is_eight_seed_game_ready:
                play_in.create_eight_seed_game()

    def get_next_play_in_game(self) -> PlayInGame | None:
        """Next play-in game to play, building the 8-seed decider once eligible."""
        if self._bracket is None or self._bracket.current_phase != PlayoffPhase.PLAY_IN:
            return None
        self._create_ready_deciders()
        return self._bracket.play_in.get_next_game()

    def get_pending_play_in_games(self) -> list[PlayInGame]:
        if self._bracket is None or self._bracket.current_phase != PlayoffPhase.PLAY_IN:
            return []
        self._create_ready_deciders()
        return self._bracket.play_in.get_pending_games()

    def _resolve_play_in_game(
        self, game: PlayInGame | str
    ) -> tuple[PlayoffBracket, ConferencePlayInBracket, PlayInGame]:
        bracket = self._bracket
        if bracket is None:
            raise NotFoundError("No playoffs in progress")
        game_id = game if isinstance(game, str) else game.game_id
        found = self._bracket.play_in.find_game(game_id)
        if found is None and self._bracket.current_phase == PlayoffPhase.PLAY_IN:
            self._create_ready_deciders()
            found = self._bracket.play_in.find_game(game_id)
        if found is None:
            raise NotFoundError(f"Unknown play-in game {game_id}")
        return bracket, *found

    def record_play_in_result(
        self,
        game: PlayInGame | str | None,
        higher_seed_score: int,
        lower_seed_score: int,
        *,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> RecordOutcome:
        """Record a play-in final and run its cascade.

        ``game`` may be the game object (even a stale copy) or its id.
        Completing the last play-in game seeds both first rounds.
        """
        if game is None:
            return self._reject(NotFoundError("No play-in game given"), "record_play_in_result")

        try:
            bracket, play_in, target = self._resolve_play_in_game(game)
            if target.is_complete:
                if target.matches(higher_seed_score, lower_seed_score):
                    logger.debug("play_in_result_duplicate game=%s", target.game_id)
                    return RecordOutcome(applied=False)
                raise SequenceError(f"Play-in game {target.game_id} already has a different result")
            if self.current_phase != PlayoffPhase.PLAY_IN:
                raise InvalidStateError(f"Play-in is closed (phase {self.current_phase.value})")
            if not target.has_participants:
                raise PrerequisiteError(f"Play-in game {target.game_id} has no opponents yet")
            validate_scores(higher_seed_score, lower_seed_score)
            if overtime_periods < 0:
                raise InvalidResultError("overtime_periods cannot be negative")
        except PlayoffError as exc:
            return self._reject(exc, "record_play_in_result")

        events: list[DeferredEvent] = []

        play_in.record_game_result(
            target, higher_seed_score, lower_seed_score, was_overtime, overtime_periods
        )
        logger.info(
            "play_in_game_completed game=%s score=%d-%d winner=%s",
            target.game_id,
            higher_seed_score,
            lower_seed_score,
            target.winner_team_id,
        )
        events.append(
            (
                "playoffs.play_in_game_completed",
                {"season": self._season, "game": target.model_dump(mode="json")},
            )
        )

        phase_changed = False
        if bracket.play_in.is_complete:
            seeds = {
                p.conference: {"seven": p.seven_seed_team_id, "eight": p.eight_seed_team_id}
                for p in bracket.play_in.brackets
            }
            logger.info("play_in_complete season=%d seeds=%s", self._season, seeds)
            events.append(
                (
                    "playoffs.play_in_completed",
                    {
                        "season": self._season,
                        "seeds": seeds,
                        "eliminated": bracket.play_in.eliminated_team_ids,
                    },
                )
            )
            previous = bracket.current_phase
            phase_changed = bracket.try_advance_round()
            if phase_changed:
                events.append(self._phase_event(previous, bracket.current_phase))

        self._publish(events)
        return RecordOutcome(
            applied=True,
            phase_changed=phase_changed,
            events=[event_type for event_type, _ in events],
        )

    # ------------------------------------------------------------------
    # Series
    # ------------------------------------------------------------------

    def get_active_series(self) -> list[PlayoffSeries]:
        return self._bracket.get_active_series() if self._bracket else []

    def get_series(self, series_id: str) -> PlayoffSeries | None:
        return self._bracket.find_series(series_id) if self._bracket else None

    def get_series_for_team(self, team_id: str) -> PlayoffSeries | None:
        """The undecided series ``team_id`` is currently playing, if any."""
        return next((s for s in self.get_active_series() if s.involves(team_id)), None)

    def get_series_history_for_team(self, team_id: str) -> list[PlayoffSeries]:
        if self._bracket is None:
            return []
        return [s for s in self._bracket.all_series() if s.involves(team_id)]

    def get_next_playoff_game(self) -> tuple[PlayoffSeries, PlayoffGame | None] | None:
        """Series to play next and its scheduled game (None until the calendar creates it).

        Closeout games come first, then the series with the fewest games played.
        """
        active = self.get_active_series()
        if not active:
            return None
        series = sorted(active, key=lambda s: (not s.is_closeout_game(), s.total_games_played))[0]
        return series, series.pending_game

    def record_playoff_game_result(
        self,
        series: PlayoffSeries | str | None,
        game_number: int,
        home_score: int,
        away_score: int,
        *,
        was_overtime: bool = False,
        overtime_periods: int = 0,
    ) -> RecordOutcome:
        """Record a series game and run its cascade.

        ``series`` may be the series object (even a stale copy) or its id.
        Re-delivering a result already on record is a silent no-op.
        """
        if series is None:
            return self._reject(NotFoundError("No series given"), "record_playoff_game_result")

        try:
            bracket = self._bracket
            if bracket is None:
                raise NotFoundError("No playoffs in progress")
            series_id = series if isinstance(series, str) else series.series_id
            live = bracket.find_series(series_id)
            if live is None:
                raise NotFoundError(f"Unknown series {series_id}")

            existing = live.get_game(game_number)
            if existing is not None and existing.is_complete:
                if existing.matches(home_score, away_score):
                    logger.debug("series_result_duplicate series=%s game=%d", series_id, game_number)
                    return RecordOutcome(applied=False)
                raise SequenceError(f"Series {series_id} game {game_number} is already final")
            if bracket.is_complete:
                raise InvalidStateError(f"Season {self._season} playoffs are complete")
            if live.is_complete:
                raise InvalidStateError(f"Series {series_id} is already complete ({live.record})")
            if game_number != live.next_game_number:
                raise SequenceError(
                    f"Series {series_id}: expected game {live.next_game_number}, got {game_number}"
                )
            validate_scores(home_score, away_score)
            if overtime_periods < 0:
                raise InvalidResultError("overtime_periods cannot be negative")
        except PlayoffError as exc:
            return self._reject(exc, "record_playoff_game_result")

        events: list[DeferredEvent] = []

        game = live.record_game_result(
            game_number,
            home_score,
            away_score,
            was_overtime=was_overtime,
            overtime_periods=overtime_periods,
        )
        logger.info(
            "playoff_game_completed series=%s game=%d score=%d-%d series_record=%s",
            live.series_id,
            game_number,
            home_score,
            away_score,
            live.record,
        )
        events.append(
            (
                "playoffs.game_completed",
                {
                    "season": self._season,
                    "series_id": live.series_id,
                    "game": game.model_dump(mode="json"),
                    "series_record": live.record,
                },
            )
        )

        phase_changed = False
        if live.is_complete:
            phase_changed = self._handle_series_complete(bracket, live, events)

        self._publish(events)
        return RecordOutcome(
            applied=True,
            phase_changed=phase_changed,
            events=[event_type for event_type, _ in events],
        )

    def _handle_series_complete(
        self,
        bracket: PlayoffBracket,
        series: PlayoffSeries,
        events: list[DeferredEvent],
    ) -> bool:
        logger.info(
            "series_complete series=%s winner=%s record=%s",
            series.series_id,
            series.winner_team_id,
            series.record,
        )
        events.append(
            (
                "playoffs.series_completed",
                {"season": self._season, "series": series.model_dump(mode="json")},
            )
        )

        if series.round == PlayoffRound.CONFERENCE_FINALS:
            logger.info(
                "conference_champion conference=%s team=%s",
                series.conference,
                series.winner_team_id,
            )
            events.append(
                (
                    "playoffs.conference_champion",
                    {
                        "season": self._season,
                        "conference": series.conference,
                        "team_id": series.winner_team_id,
                    },
                )
            )

        previous = bracket.current_phase
        phase_changed = bracket.try_advance_round()

        if series.round == PlayoffRound.FINALS and bracket.champion_team_id:
            finals_record = (
                f"{max(series.higher_seed_wins, series.lower_seed_wins)}-"
                f"{min(series.higher_seed_wins, series.lower_seed_wins)}"
            )
            logger.info(
                "champion_crowned season=%d champion=%s runner_up=%s record=%s",
                self._season,
                bracket.champion_team_id,
                bracket.finals_runner_up_team_id,
                finals_record,
            )
            events.append(
                (
                    "playoffs.champion_crowned",
                    {
                        "season": self._season,
                        "champion_team_id": bracket.champion_team_id,
                        "runner_up_team_id": bracket.finals_runner_up_team_id,
                        "finals_record": finals_record,
                    },
                )
            )

        if phase_changed:
            events.append(self._phase_event(previous, bracket.current_phase))
            if bracket.current_phase == PlayoffPhase.FINALS and bracket.finals is not None:
                events.append(
                    (
                        "playoffs.finals_started",
                        {"season": self._season, "series": bracket.finals.model_dump(mode="json")},
                    )
                )
        return phase_changed

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    def schedule_current_round_games(self, start_date: dt.date) -> list[ScheduledGame]:
        """Dated entries for every game playable now, starting at ``start_date``."""
        if self._bracket is None or self._bracket.is_complete:
            return []
        if self._bracket.current_phase == PlayoffPhase.PLAY_IN:
            return schedule_play_in_games(
                self.get_pending_play_in_games(),
                start_date,
                self._settings.postseason_play_in_day_spacing,
            )
        return schedule_series_games(
            self.get_active_series(),
            start_date,
            self._settings.postseason_series_day_spacing,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _field_team_ids(self) -> set[str]:
        """Every team seeded into the postseason (seeds 1-10, or 1-8 without a play-in)."""
        if self._bracket is None:
            return set()
        return {
            s.team_id
            for conference in self._bracket.conferences
            for s in conference.standings
            if s.seed <= PLAY_IN_FIELD_SIZE
        }

    def get_eliminated_team_ids(self) -> list[str]:
        """Teams knocked out so far: play-in eliminations, then series losers."""
        if self._bracket is None:
            return []
        eliminated = list(self._bracket.play_in.eliminated_team_ids)
        for series in self._bracket.all_series():
            if series.loser_team_id and series.loser_team_id not in eliminated:
                eliminated.append(series.loser_team_id)
        return eliminated

    def is_team_alive(self, team_id: str) -> bool:
        """Whether ``team_id`` can still win the title.

        Computed from the whole bracket, not only the series in play: a team
        that lost in an earlier round stays eliminated after that round's
        series stop being active. Unknown teams are not alive.
        """
        if self._bracket is None or not self._is_active:
            return False
        if team_id not in self._field_team_ids():
            return False
        if self._bracket.is_complete:
            return team_id == self._bracket.champion_team_id
        return team_id not in self.get_eliminated_team_ids()

    def get_team_status(self, team_id: str) -> str | None:
        """Short status line for a team, or None for teams outside the field."""
        if self._bracket is None or team_id not in self._field_team_ids():
            return None
        if self._bracket.champion_team_id == team_id:
            return "NBA Champion"
        if not self.is_team_alive(team_id):
            return "Eliminated"

        series = self.get_series_for_team(team_id)
        if series is not None:
            return series.get_status_string(self._name_resolver)

        if self._bracket.current_phase == PlayoffPhase.PLAY_IN:
            for play_in in self._bracket.play_in.brackets:
                if team_id == play_in.seven_seed_team_id:
                    return "Clinched 7 Seed"
                if team_id == play_in.eight_seed_team_id:
                    return "Clinched 8 Seed"
                if team_id in play_in.participant_ids:
                    return "In Play-In Tournament"
            return "Awaiting First Round"
        return "Awaiting Next Round"

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    def create_save_data(self) -> PlayoffSaveData | None:
        """Snapshot of the current postseason; independent of the live bracket."""
        if self._bracket is None:
            return None
        return PlayoffSaveData(
            season=self._season,
            is_active=self._is_active,
            current_phase=self._bracket.current_phase,
            bracket=self._bracket.model_copy(deep=True),
        )

    def restore_from_save(self, save_data: PlayoffSaveData | dict[str, Any] | None) -> None:
        """Replace controller state with a snapshot. None is ignored.

        Raises:
            pydantic.ValidationError: the snapshot breaks a bracket invariant.
        """
        if save_data is None:
            return
        if isinstance(save_data, dict):
            save_data = load_snapshot(save_data)

        self._season = save_data.season
        self._is_active = save_data.is_active
        self._bracket = save_data.bracket.model_copy(deep=True)
        logger.info(
            "playoffs_restored season=%d phase=%s active=%s",
            self._season,
            self._bracket.current_phase.value,
            self._is_active,
        )

    def end_playoffs(self) -> None:
        """Mark the postseason finished (the season is moving to the offseason)."""
        self._is_active = False
        logger.info("playoffs_ended season=%d", self._season)
