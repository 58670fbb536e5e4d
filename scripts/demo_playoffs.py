"""Run a full NBA postseason with random scores for demo purposes.

Usage:
    python scripts/demo_playoffs.py run [SEED]     # Play-in through Finals, save snapshot
    python scripts/demo_playoffs.py status [PATH]  # Print a saved snapshot's state

Scores come from a seeded random feed standing in for the game engine.
The snapshot path defaults to POSTSEASON_SNAPSHOT_PATH.
"""

from __future__ import annotations

import datetime as dt
import logging
import random
import sys
from pathlib import Path

from postseason.config import Settings
from postseason.core.codec import load_snapshot_yaml, save_snapshot_yaml
from postseason.core.controller import PlayoffController
from postseason.core.event_bus import EventBus
from postseason.models.constants import PlayoffPhase
from postseason.models.standings import TeamStandingsRef

logger = logging.getLogger("demo_playoffs")

EAST_TEAMS = [
    ("BOS", "Boston"),
    ("NYK", "New York"),
    ("MIL", "Milwaukee"),
    ("CLE", "Cleveland"),
    ("ORL", "Orlando"),
    ("IND", "Indiana"),
    ("PHI", "Philadelphia"),
    ("MIA", "Miami"),
    ("CHI", "Chicago"),
    ("ATL", "Atlanta"),
]

WEST_TEAMS = [
    ("OKC", "Oklahoma City"),
    ("DEN", "Denver"),
    ("MIN", "Minnesota"),
    ("LAC", "Los Angeles Clippers"),
    ("DAL", "Dallas"),
    ("PHX", "Phoenix"),
    ("NOP", "New Orleans"),
    ("LAL", "Los Angeles Lakers"),
    ("SAC", "Sacramento"),
    ("GSW", "Golden State"),
]

TEAM_NAMES = dict(EAST_TEAMS + WEST_TEAMS)


def build_standings(teams: list[tuple[str, str]], conference: str) -> list[TeamStandingsRef]:
    """Standings with win totals falling two games per seed."""
    return [
        TeamStandingsRef(
            team_id=team_id,
            team_name=name,
            conference=conference,
            seed=index + 1,
            wins=64 - 2 * index,
            losses=18 + 2 * index,
        )
        for index, (team_id, name) in enumerate(teams)
    ]


def random_score(rng: random.Random) -> tuple[int, int, int]:
    """(first_score, second_score, overtime_periods) with no ties."""
    first = rng.randint(92, 128)
    second = rng.randint(92, 128)
    overtime_periods = 0
    while first == second:
        overtime_periods += 1
        first += rng.randint(4, 14)
        second += rng.randint(4, 14)
    return first, second, overtime_periods


def log_event(envelope: dict) -> None:
    data = envelope["data"]
    if envelope["type"] == "playoffs.phase_changed":
        logger.info("PHASE %s -> %s", data["from_phase"], data["to_phase"])
    elif envelope["type"] == "playoffs.series_completed":
        series = data["series"]
        side = "higher" if series["higher_seed_wins"] == 4 else "lower"
        winner = series[f"{side}_seed_team_id"]
        logger.info("SERIES %s won by %s", series["series_id"], TEAM_NAMES.get(winner, winner))
    elif envelope["type"] == "playoffs.champion_crowned":
        logger.info(
            "CHAMPION %s (Finals %s)",
            TEAM_NAMES.get(data["champion_team_id"]),
            data["finals_record"],
        )


def run(seed: int) -> None:
    settings = Settings()
    rng = random.Random(seed)
    bus = EventBus()
    bus.on(None, log_event)
    controller = PlayoffController(
        event_bus=bus, settings=settings, name_resolver=TEAM_NAMES.get
    )

    controller.initialize_playoffs(
        2025,
        build_standings(EAST_TEAMS, "Eastern"),
        build_standings(WEST_TEAMS, "Western"),
    )

    day = dt.date(2025, 4, 15)
    while controller.current_phase == PlayoffPhase.PLAY_IN:
        scheduled = controller.schedule_current_round_games(day)
        if not scheduled:
            break
        for entry in scheduled:
            higher, lower, overtime = random_score(rng)
            controller.record_play_in_result(
                entry.event_id,
                higher,
                lower,
                was_overtime=overtime > 0,
                overtime_periods=overtime,
            )
        day += dt.timedelta(days=max(len(scheduled), 1))

    while controller.current_phase != PlayoffPhase.COMPLETE:
        scheduled = controller.schedule_current_round_games(day)
        if not scheduled:
            break
        for entry in scheduled:
            home, away, overtime = random_score(rng)
            controller.record_playoff_game_result(
                entry.series_id,
                entry.game_number,
                home,
                away,
                was_overtime=overtime > 0,
                overtime_periods=overtime,
            )
        day += dt.timedelta(days=settings.postseason_series_day_spacing)

    save_data = controller.create_save_data()
    if save_data is None:
        print("Nothing to save.")
        return
    path = Path(settings.postseason_snapshot_path)
    save_snapshot_yaml(save_data, path)
    print(f"Snapshot saved to {path}")


def status(path: Path) -> None:
    if not path.exists():
        print(f"No snapshot at {path}")
        return
    save_data = load_snapshot_yaml(path)
    controller = PlayoffController(name_resolver=TEAM_NAMES.get)
    controller.restore_from_save(save_data)

    print(f"Season {controller.season}: {controller.current_phase.value}")
    bracket = controller.bracket
    if bracket is None:
        return
    for series in bracket.all_series():
        print(f"  {series.series_id:<28} {series.get_status_string(TEAM_NAMES.get)}")
    if bracket.champion_team_id:
        print(f"Champion: {TEAM_NAMES.get(bracket.champion_team_id, bracket.champion_team_id)}")


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return

    logging.basicConfig(
        level=Settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cmd = sys.argv[1]
    if cmd == "run":
        seed = int(sys.argv[2]) if len(sys.argv) > 2 else 7
        run(seed)
    elif cmd == "status":
        path = Path(sys.argv[2]) if len(sys.argv) > 2 else Path(Settings().postseason_snapshot_path)
        status(path)
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)


if __name__ == "__main__":
    main()
