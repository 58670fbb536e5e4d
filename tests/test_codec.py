"""Tests for postseason snapshots: save, restore, JSON and YAML round trips."""

import pytest
import yaml
from pydantic import ValidationError

from postseason.core.codec import (
    dump_snapshot,
    load_snapshot,
    load_snapshot_yaml,
    save_snapshot_yaml,
    snapshot_from_json,
    snapshot_to_json,
)
from postseason.core.controller import PlayoffController
from postseason.models.constants import PlayoffPhase


@pytest.fixture
def mid_series(started: PlayoffController) -> PlayoffController:
    """Play-in finished, a few first-round games played, one game scheduled."""
    game = started.get_next_play_in_game()
    while game is not None:
        started.record_play_in_result(game, 110, 100)
        game = started.get_next_play_in_game()
    started.record_playoff_game_result("Eastern_first_round_1v8", 1, 110, 100)
    started.record_playoff_game_result("Eastern_first_round_1v8", 2, 99, 101)
    started.record_playoff_game_result("Western_first_round_4v5", 1, 120, 118, overtime_periods=1)
    started.get_series("Eastern_first_round_3v6").create_next_game()
    return started


def _query_state(controller: PlayoffController) -> dict:
    return {
        "phase": controller.current_phase,
        "active": [(s.series_id, s.record) for s in controller.get_active_series()],
        "eliminated": controller.get_eliminated_team_ids(),
        "alive": {t: controller.is_team_alive(t) for t in ("E1", "E8", "E9", "W10", "W4")},
        "status": {t: controller.get_team_status(t) for t in ("E1", "W5", "E9")},
        "next": controller.get_next_playoff_game()[0].series_id,
    }


class TestSaveRestore:
    def test_restore_answers_queries_identically(self, mid_series, settings):
        save_data = mid_series.create_save_data()
        restored = PlayoffController(settings=settings)
        restored.restore_from_save(save_data)

        assert restored.season == 2025
        assert restored.is_playoffs_active
        assert _query_state(restored) == _query_state(mid_series)

    def test_snapshot_is_independent_of_live_bracket(self, mid_series):
        save_data = mid_series.create_save_data()
        mid_series.record_playoff_game_result("Eastern_first_round_1v8", 3, 110, 100)
        assert save_data.bracket.find_series("Eastern_first_round_1v8").record == "1-1"

    def test_restored_bracket_is_not_aliased(self, mid_series, settings):
        save_data = mid_series.create_save_data()
        restored = PlayoffController(settings=settings)
        restored.restore_from_save(save_data)
        restored.record_playoff_game_result("Eastern_first_round_1v8", 3, 110, 100)
        assert save_data.bracket.find_series("Eastern_first_round_1v8").record == "1-1"
        assert mid_series.get_series("Eastern_first_round_1v8").record == "1-1"

    def test_restored_controller_continues(self, mid_series, settings):
        restored = PlayoffController(settings=settings)
        restored.restore_from_save(dump_snapshot(mid_series.create_save_data()))
        outcome = restored.record_playoff_game_result("Eastern_first_round_1v8", 3, 110, 100)
        assert outcome.applied
        assert restored.get_series("Eastern_first_round_1v8").record == "2-1"

    def test_restore_none_is_ignored(self, mid_series):
        bracket = mid_series.bracket
        mid_series.restore_from_save(None)
        assert mid_series.bracket is bracket


class TestSnapshotFormats:
    def test_json_round_trip(self, mid_series):
        save_data = mid_series.create_save_data()
        restored = snapshot_from_json(snapshot_to_json(save_data, indent=2))
        assert restored == save_data

    def test_yaml_round_trip(self, mid_series, tmp_path):
        save_data = mid_series.create_save_data()
        path = tmp_path / "snapshot.yaml"
        save_snapshot_yaml(save_data, path)

        raw = yaml.safe_load(path.read_text())
        assert raw["current_phase"] == "first_round"
        assert raw["bracket"]["play_in"]["east"]["seven_seed_team_id"] == "E7"

        restored = load_snapshot_yaml(path)
        assert restored == save_data
        assert restored.current_phase == PlayoffPhase.FIRST_ROUND

    def test_overtime_and_dates_survive(self, mid_series):
        raw = dump_snapshot(mid_series.create_save_data())
        restored = load_snapshot(raw)
        game = restored.bracket.find_series("Western_first_round_4v5").games[0]
        assert game.was_overtime
        assert game.overtime_periods == 1


class TestCorruptSnapshots:
    def test_win_count_mismatch_rejected(self, mid_series):
        raw = dump_snapshot(mid_series.create_save_data())
        series = raw["bracket"]["eastern"]["first_round"][0]
        series["higher_seed_wins"] = 3
        with pytest.raises(ValidationError):
            load_snapshot(raw)

    def test_phase_mismatch_rejected(self, mid_series):
        raw = dump_snapshot(mid_series.create_save_data())
        raw["current_phase"] = "finals"
        with pytest.raises(ValidationError):
            load_snapshot(raw)

    def test_bad_snapshot_leaves_controller_untouched(self, mid_series):
        raw = dump_snapshot(mid_series.create_save_data())
        raw["bracket"]["western"]["first_round"][1]["games"] = []
        before = mid_series.bracket
        with pytest.raises(ValidationError):
            mid_series.restore_from_save(raw)
        assert mid_series.bracket is before
