"""Tests for standings validation before a bracket is built."""

import pytest
from pydantic import ValidationError

from postseason.core.seeding import validate_conference_standings, validate_league
from postseason.errors import InitializationError
from postseason.models.standings import TeamStandingsRef


class TestConferenceStandings:
    def test_orders_by_seed(self, east_standings):
        shuffled = list(reversed(east_standings))
        ordered = validate_conference_standings("Eastern", shuffled)
        assert [s.seed for s in ordered] == list(range(1, 11))

    def test_extra_teams_accepted(self, standings_factory):
        ordered = validate_conference_standings("Eastern", standings_factory("E", "Eastern", 15))
        assert len(ordered) == 15

    def test_empty(self):
        with pytest.raises(InitializationError):
            validate_conference_standings("Eastern", [])
        with pytest.raises(InitializationError):
            validate_conference_standings("Eastern", None)

    def test_eight_teams_need_play_in_disabled(self, standings_factory):
        eight = standings_factory("E", "Eastern", count=8)
        with pytest.raises(InitializationError):
            validate_conference_standings("Eastern", eight)
        assert len(validate_conference_standings("Eastern", eight, require_play_in=False)) == 8

    def test_duplicate_seed(self, east_standings):
        bad = east_standings[:9] + [TeamStandingsRef(team_id="E99", seed=9)]
        with pytest.raises(InitializationError, match="repeat seeds"):
            validate_conference_standings("Eastern", bad)

    def test_duplicate_team(self, east_standings):
        bad = east_standings[:9] + [TeamStandingsRef(team_id="E1", seed=10)]
        with pytest.raises(InitializationError, match="twice"):
            validate_conference_standings("Eastern", bad)

    def test_seed_gap(self, east_standings):
        bad = east_standings[:9] + [TeamStandingsRef(team_id="E11", seed=11)]
        with pytest.raises(InitializationError, match="without gaps"):
            validate_conference_standings("Eastern", bad)


class TestLeague:
    def test_valid_league(self, east_standings, west_standings):
        east, west = validate_league(east_standings, west_standings)
        assert east[0].team_id == "E1"
        assert west[0].team_id == "W1"

    def test_team_in_both_conferences(self, east_standings, west_standings):
        west = west_standings[:9] + [TeamStandingsRef(team_id="E3", seed=10)]
        with pytest.raises(InitializationError, match="both conferences"):
            validate_league(east_standings, west)


class TestStandingsRef:
    def test_win_pct_and_record(self):
        ref = TeamStandingsRef(team_id="BOS", seed=1, wins=64, losses=18)
        assert ref.record == "64-18"
        assert ref.win_pct == pytest.approx(64 / 82)

    def test_no_games_played(self):
        assert TeamStandingsRef(team_id="BOS", seed=1).win_pct == 0.0

    def test_blank_team_id_rejected(self):
        with pytest.raises(ValidationError):
            TeamStandingsRef(team_id="", seed=1)

    def test_immutable(self):
        ref = TeamStandingsRef(team_id="BOS", seed=1)
        with pytest.raises(ValidationError):
            ref.seed = 2
