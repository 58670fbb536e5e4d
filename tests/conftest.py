"""Shared test fixtures."""

import pytest

from postseason.config import Settings
from postseason.core.controller import PlayoffController
from postseason.core.event_bus import EventBus
from postseason.models.standings import TeamStandingsRef


def build_standings(prefix: str, conference: str, count: int = 10, top_wins: int = 60):
    """``count`` teams ``{prefix}1..{prefix}N``; wins fall by three per seed."""
    return [
        TeamStandingsRef(
            team_id=f"{prefix}{seed}",
            seed=seed,
            wins=top_wins - 3 * (seed - 1),
            losses=82 - (top_wins - 3 * (seed - 1)),
            team_name=f"{conference} Team {seed}",
            conference=conference,
        )
        for seed in range(1, count + 1)
    ]


@pytest.fixture
def standings_factory():
    return build_standings


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(postseason_env="development")


@pytest.fixture
def east_standings() -> list[TeamStandingsRef]:
    return build_standings("E", "Eastern", top_wins=60)


@pytest.fixture
def west_standings() -> list[TeamStandingsRef]:
    # West's top seed finishes with the best record in the league.
    return build_standings("W", "Western", top_wins=63)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def controller(bus: EventBus, settings: Settings) -> PlayoffController:
    return PlayoffController(event_bus=bus, settings=settings)


@pytest.fixture
def started(
    controller: PlayoffController,
    east_standings: list[TeamStandingsRef],
    west_standings: list[TeamStandingsRef],
) -> PlayoffController:
    """A controller with the 2025 bracket initialized and the play-in open."""
    controller.initialize_playoffs(2025, east_standings, west_standings)
    return controller
