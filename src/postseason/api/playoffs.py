"""Playoff API endpoints."""

from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from postseason.api.deps import ControllerDep, SettingsDep
from postseason.core.codec import dump_snapshot
from postseason.core.controller import RecordOutcome
from postseason.errors import InitializationError
from postseason.models.constants import MAX_SERIES_GAMES, WINS_TO_CLINCH, PlayoffPhase
from postseason.models.standings import TeamStandingsRef

router = APIRouter(prefix="/api/playoffs", tags=["playoffs"])


# --- Request Models ---


class InitializeRequest(BaseModel):
    season: int
    east: list[TeamStandingsRef]
    west: list[TeamStandingsRef]


class PlayInResultRequest(BaseModel):
    higher_seed_score: int
    lower_seed_score: int
    was_overtime: bool = False
    overtime_periods: int = Field(default=0, ge=0)


class SeriesGameResultRequest(BaseModel):
    home_score: int
    away_score: int
    was_overtime: bool = False
    overtime_periods: int = Field(default=0, ge=0)


def _outcome_response(outcome: RecordOutcome) -> dict:
    if outcome.error_type == "NotFoundError":
        raise HTTPException(status_code=404, detail=outcome.error)
    return {"data": outcome.to_dict()}


# --- Endpoints ---


@router.get("")
async def get_playoffs(controller: ControllerDep) -> dict:
    """Current postseason snapshot, or null before initialization."""
    save_data = controller.create_save_data()
    return {"data": dump_snapshot(save_data) if save_data else None}


@router.post("/initialize")
async def initialize_playoffs(body: InitializeRequest, controller: ControllerDep) -> dict:
    """Build a new bracket from regular-season standings."""
    try:
        controller.initialize_playoffs(body.season, body.east, body.west)
    except InitializationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    save_data = controller.create_save_data()
    return {"data": dump_snapshot(save_data) if save_data else None}


@router.post("/skip-play-in")
async def skip_play_in(controller: ControllerDep) -> dict:
    """Seed round 1 directly from standings positions 7 and 8."""
    applied = controller.skip_play_in()
    return {"data": {"applied": applied, "phase": controller.current_phase.value}}


@router.get("/series")
async def get_active_series(controller: ControllerDep) -> dict:
    """Every series still being played."""
    return {"data": [s.model_dump(mode="json") for s in controller.get_active_series()]}


@router.get("/next-game")
async def get_next_game(controller: ControllerDep) -> dict:
    """The next play-in game, or the series that should play next."""
    if controller.current_phase == PlayoffPhase.PLAY_IN:
        game = controller.get_next_play_in_game()
        if game is None:
            return {"data": None}
        return {"data": {"kind": "play_in", "game": game.model_dump(mode="json")}}

    upcoming = controller.get_next_playoff_game()
    if upcoming is None:
        return {"data": None}
    series, game = upcoming
    return {
        "data": {
            "kind": "series",
            "series_id": series.series_id,
            "game_number": series.next_game_number,
            "status": series.get_status_string(),
            "game": game.model_dump(mode="json") if game else None,
        }
    }


@router.post("/play-in/{game_id}/result")
async def record_play_in_result(
    game_id: str, body: PlayInResultRequest, controller: ControllerDep
) -> dict:
    """Record a play-in final. Rejected results come back with ``applied=false``."""
    outcome = controller.record_play_in_result(
        game_id,
        body.higher_seed_score,
        body.lower_seed_score,
        was_overtime=body.was_overtime,
        overtime_periods=body.overtime_periods,
    )
    return _outcome_response(outcome)


@router.post("/series/{series_id}/games/{game_number}/result")
async def record_series_game_result(
    series_id: str,
    game_number: int,
    body: SeriesGameResultRequest,
    controller: ControllerDep,
) -> dict:
    """Record a series game final. Rejected results come back with ``applied=false``."""
    outcome = controller.record_playoff_game_result(
        series_id,
        game_number,
        body.home_score,
        body.away_score,
        was_overtime=body.was_overtime,
        overtime_periods=body.overtime_periods,
    )
    return _outcome_response(outcome)


@router.get("/teams/{team_id}")
async def get_team(team_id: str, controller: ControllerDep) -> dict:
    """Whether a team is still alive, its status line, and its current series."""
    status = controller.get_team_status(team_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Team not in the postseason field")
    series = controller.get_series_for_team(team_id)
    return {
        "data": {
            "team_id": team_id,
            "alive": controller.is_team_alive(team_id),
            "status": status,
            "series": series.model_dump(mode="json") if series else None,
            "series_history": [
                s.series_id for s in controller.get_series_history_for_team(team_id)
            ],
        }
    }


@router.get("/schedule")
async def get_schedule(start: dt.date, controller: ControllerDep) -> dict:
    """Calendar entries for every game playable in the current round."""
    scheduled = controller.schedule_current_round_games(start)
    return {"data": [g.model_dump(mode="json") for g in scheduled]}


@router.get("/rules")
async def get_rules(settings: SettingsDep) -> dict:
    """Format and calendar spacing this deployment runs with."""
    return {
        "data": {
            "play_in_enabled": settings.postseason_play_in_enabled,
            "wins_to_clinch": WINS_TO_CLINCH,
            "max_series_games": MAX_SERIES_GAMES,
            "play_in_day_spacing": settings.postseason_play_in_day_spacing,
            "series_day_spacing": settings.postseason_series_day_spacing,
        }
    }
