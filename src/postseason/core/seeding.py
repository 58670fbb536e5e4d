"""Postseason seeding — validating and ordering conference standings.

Standings arrive from the regular-season collaborator as ``TeamStandingsRef``
lists, one per conference. Anything malformed here is a caller contract
violation and raises ``InitializationError`` before a bracket is built.
"""

from __future__ import annotations

from collections import Counter

from postseason.errors import InitializationError
from postseason.models.constants import PLAY_IN_FIELD_SIZE, PLAYOFF_TEAMS_PER_CONFERENCE
from postseason.models.standings import TeamStandingsRef


def order_standings(standings: list[TeamStandingsRef]) -> list[TeamStandingsRef]:
    """Return standings sorted by seed (1 first)."""
    return sorted(standings, key=lambda s: s.seed)


def required_field_size(require_play_in: bool) -> int:
    return PLAY_IN_FIELD_SIZE if require_play_in else PLAYOFF_TEAMS_PER_CONFERENCE


def validate_conference_standings(
    conference: str,
    standings: list[TeamStandingsRef] | None,
    *,
    require_play_in: bool = True,
) -> list[TeamStandingsRef]:
    """Validate one conference's standings and return them ordered by seed.

    Args:
        conference: Conference name, used in error messages.
        standings: Regular-season standings. Teams seeded past the play-in
            field are accepted and ignored.
        require_play_in: Whether seeds 9 and 10 must be present.

    Raises:
        InitializationError: too few teams, duplicate seeds or team ids, or
            seeds that do not run 1..N without gaps.
    """
    if not standings:
        raise InitializationError(f"No standings supplied for the {conference} conference")

    needed = required_field_size(require_play_in)
    if len(standings) < needed:
        raise InitializationError(
            f"{conference} standings need at least {needed} teams, got {len(standings)}"
        )

    seed_counts = Counter(s.seed for s in standings)
    duplicates = sorted(seed for seed, count in seed_counts.items() if count > 1)
    if duplicates:
        raise InitializationError(f"{conference} standings repeat seeds {duplicates}")

    team_counts = Counter(s.team_id for s in standings)
    repeated = sorted(team for team, count in team_counts.items() if count > 1)
    if repeated:
        raise InitializationError(f"{conference} standings list teams twice: {repeated}")

    ordered = order_standings(standings)
    expected = list(range(1, len(ordered) + 1))
    if [s.seed for s in ordered] != expected:
        raise InitializationError(f"{conference} seeds must run 1..{len(ordered)} without gaps")

    return ordered


def validate_league(
    east: list[TeamStandingsRef] | None,
    west: list[TeamStandingsRef] | None,
    *,
    require_play_in: bool = True,
) -> tuple[list[TeamStandingsRef], list[TeamStandingsRef]]:
    """Validate both conferences and reject a team listed in both."""
    east_ordered = validate_conference_standings("Eastern", east, require_play_in=require_play_in)
    west_ordered = validate_conference_standings("Western", west, require_play_in=require_play_in)

    overlap = sorted({s.team_id for s in east_ordered} & {s.team_id for s in west_ordered})
    if overlap:
        raise InitializationError(f"Teams listed in both conferences: {overlap}")
    return east_ordered, west_ordered
