"""Calendar entries for upcoming postseason games.

The calendar collaborator owns dates and display; this module only turns the
bracket's next playable games into dated ``ScheduledGame`` entries. Scheduling
materialises pending game records (the next series game, the play-in decider
once eligible) so they can carry a date. It never records a result.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel

from postseason.models.constants import PlayoffRound
from postseason.models.game import PlayInGame, PlayInGameType
from postseason.models.series import PlayoffSeries

PLAY_IN_TITLES: dict[PlayInGameType, str] = {
    PlayInGameType.SEVEN_VS_EIGHT: "Play-In: 7/8 Game",
    PlayInGameType.NINE_VS_TEN: "Play-In: 9/10 Elimination",
    PlayInGameType.EIGHT_SEED_DECIDER: "Play-In: 8-Seed Decider",
}


class ScheduledGame(BaseModel):
    """A dated postseason game as handed to the calendar."""

    event_id: str
    series_id: str | None = None
    date: dt.date
    home_team_id: str
    away_team_id: str
    title: str
    description: str = ""
    playoff_round: int = 0
    game_number: int = 1
    is_playoff_game: bool = True
    is_elimination: bool = False


def play_in_title(game_type: PlayInGameType) -> str:
    return PLAY_IN_TITLES.get(game_type, "Play-In Game")


def series_round_name(series: PlayoffSeries) -> str:
    if series.round == PlayoffRound.CONFERENCE_FINALS:
        return f"{series.conference} Finals"
    return series.round.label


def series_title(series: PlayoffSeries, game_number: int) -> str:
    """Title such as ``"First Round - Game 6 (Elimination)"`` or ``"... (GAME 7)"``."""
    title = f"{series_round_name(series)} - Game {game_number}"
    if series.is_game_seven():
        title += " (GAME 7)"
    elif series.is_closeout_game():
        title += " (Elimination)"
    return title


def matchup_description(series: PlayoffSeries) -> str:
    """Seed line for a series; Finals seeds are conference seeds."""
    if series.round == PlayoffRound.FINALS:
        return f"#{series.higher_seed} (home court) vs #{series.lower_seed}"
    return f"#{series.higher_seed} vs #{series.lower_seed}"


def schedule_play_in_games(
    games: list[PlayInGame],
    start_date: dt.date,
    day_spacing: int = 1,
) -> list[ScheduledGame]:
    """Date each pending play-in game, one every ``day_spacing`` days."""
    scheduled: list[ScheduledGame] = []
    current = start_date
    for game in games:
        if game.is_complete or not game.has_participants:
            continue
        game.date = current
        scheduled.append(
            ScheduledGame(
                event_id=game.game_id,
                date=current,
                home_team_id=game.home_team_id or "",
                away_team_id=game.away_team_id or "",
                title=play_in_title(game.game_type),
                description=f"{game.conference} Conference Play-In",
                playoff_round=PlayoffRound.PLAY_IN.number,
                game_number=1,
                is_elimination=game.eliminates_loser,
            )
        )
        current += dt.timedelta(days=day_spacing)
    return scheduled


def schedule_series_games(
    series_list: list[PlayoffSeries],
    start_date: dt.date,
    day_spacing: int = 2,
) -> list[ScheduledGame]:
    """Date the next game of every undecided series, ``day_spacing`` days apart."""
    scheduled: list[ScheduledGame] = []
    current = start_date
    for series in series_list:
        game = series.create_next_game(current)
        if game is None:
            continue
        scheduled.append(
            ScheduledGame(
                event_id=game.game_id,
                series_id=series.series_id,
                date=current,
                home_team_id=game.home_team_id,
                away_team_id=game.away_team_id,
                title=series_title(series, game.game_number),
                description=matchup_description(series),
                playoff_round=series.round.number,
                game_number=game.game_number,
                is_elimination=series.is_closeout_game(),
            )
        )
        current += dt.timedelta(days=day_spacing)
    return scheduled
