"""Tests for conference brackets and the tournament-wide bracket."""

import pytest

from postseason.errors import InvalidStateError, NotFoundError
from postseason.models.bracket import ConferenceBracket, PlayoffBracket
from postseason.models.constants import PlayoffPhase, PlayoffRound
from postseason.models.series import PlayoffSeries


def _sweep(series: PlayoffSeries, team_id: str) -> None:
    while not series.is_complete:
        n = series.next_game_number
        if series.home_team_for_game(n) == team_id:
            series.record_game_result(n, 110, 100)
        else:
            series.record_game_result(n, 100, 110)


def _seeded_conference(standings) -> ConferenceBracket:
    bracket = ConferenceBracket(conference="Eastern")
    bracket.initialize(standings)
    bracket.set_play_in_results("E7", "E8")
    return bracket


def _new_bracket(east, west) -> PlayoffBracket:
    bracket = PlayoffBracket.create(2025)
    bracket.play_in.initialize(east, west)
    bracket.eastern.initialize(east)
    bracket.western.initialize(west)
    bracket.current_phase = PlayoffPhase.PLAY_IN
    bracket.play_in.east.apply_direct_seeds("E7", "E8")
    bracket.play_in.west.apply_direct_seeds("W7", "W8")
    assert bracket.try_advance_round()
    return bracket


def _chalk_round(bracket: PlayoffBracket) -> None:
    for series in bracket.get_active_series():
        _sweep(series, series.higher_seed_team_id)


class TestConferenceSetup:
    def test_direct_qualifiers_seeded(self, east_standings):
        bracket = ConferenceBracket(conference="Eastern")
        bracket.initialize(east_standings)
        assert bracket.seeds[:6] == ["E1", "E2", "E3", "E4", "E5", "E6"]
        assert bracket.seeds[6:] == [None, None]
        assert bracket.first_round == []
        assert bracket.current_round is None

    def test_first_round_bracket_order(self, east_standings):
        bracket = _seeded_conference(east_standings)
        assert [s.series_id for s in bracket.first_round] == [
            "Eastern_first_round_1v8",
            "Eastern_first_round_4v5",
            "Eastern_first_round_3v6",
            "Eastern_first_round_2v7",
        ]
        assert bracket.current_round == PlayoffRound.FIRST_ROUND

    def test_repeat_play_in_results_is_noop(self, east_standings):
        bracket = _seeded_conference(east_standings)
        first_round = bracket.first_round
        bracket.set_play_in_results("E7", "E8")
        assert bracket.first_round is first_round

    def test_conflicting_play_in_results_rejected(self, east_standings):
        bracket = _seeded_conference(east_standings)
        with pytest.raises(InvalidStateError):
            bracket.set_play_in_results("E9", "E8")


class TestConferenceProgression:
    def test_no_advance_while_round_in_progress(self, east_standings):
        bracket = _seeded_conference(east_standings)
        _sweep(bracket.first_round[0], "E1")
        assert bracket.try_advance_round() is None
        assert bracket.conference_semis == []

    def test_chalk_semis_and_idempotent_advance(self, east_standings):
        bracket = _seeded_conference(east_standings)
        for series in bracket.first_round:
            _sweep(series, series.higher_seed_team_id)

        assert bracket.try_advance_round() == PlayoffRound.CONFERENCE_SEMIS
        semis = bracket.conference_semis
        assert [s.series_id for s in semis] == [
            "Eastern_conference_semis_1v4",
            "Eastern_conference_semis_2v3",
        ]
        assert bracket.try_advance_round() is None
        assert bracket.conference_semis is semis

    def test_upsets_stay_in_their_half(self, east_standings):
        bracket = _seeded_conference(east_standings)
        # Top half: 8 over 1, 5 over 4. Bottom half: 6 over 3, 7 over 2.
        for series in bracket.first_round:
            _sweep(series, series.lower_seed_team_id)
        bracket.try_advance_round()

        top, bottom = bracket.conference_semis
        assert (top.higher_seed_team_id, top.lower_seed_team_id) == ("E5", "E8")
        assert (bottom.higher_seed_team_id, bottom.lower_seed_team_id) == ("E6", "E7")
        # Better original seed hosts game 1.
        assert top.home_team_for_game(1) == "E5"

        _sweep(top, "E8")
        _sweep(bottom, "E6")
        assert bracket.try_advance_round() == PlayoffRound.CONFERENCE_FINALS
        finals = bracket.conference_finals
        assert finals is not None
        assert finals.series_id == "Eastern_conference_finals_6v8"
        assert finals.higher_seed_team_id == "E6"

    def test_champion_declared_once(self, east_standings):
        bracket = _seeded_conference(east_standings)
        for _ in range(3):
            for series in bracket.get_active_series():
                _sweep(series, series.higher_seed_team_id)
            bracket.try_advance_round()

        assert bracket.conference_champion == "E1"
        assert bracket.champion_declared
        assert bracket.try_advance_round() is None
        assert bracket.get_team_total_wins("E1") == 12
        assert bracket.get_active_series() == []

    def test_find_series(self, east_standings):
        bracket = _seeded_conference(east_standings)
        assert bracket.find_series("Eastern_first_round_3v6") is bracket.first_round[2]
        assert bracket.find_series("Eastern_first_round_1v2") is None


class TestPlayoffBracket:
    def test_create_starts_not_started(self):
        bracket = PlayoffBracket.create(2025)
        assert bracket.current_phase == PlayoffPhase.NOT_STARTED
        assert bracket.eastern.conference == "Eastern"
        assert bracket.western.conference == "Western"
        assert not bracket.try_advance_round()

    def test_unknown_conference(self):
        with pytest.raises(NotFoundError):
            PlayoffBracket.create(2025).conference("Central")

    def test_rounds_advance_in_lockstep(self, east_standings, west_standings):
        bracket = _new_bracket(east_standings, west_standings)
        assert bracket.current_phase == PlayoffPhase.FIRST_ROUND

        for series in bracket.eastern.first_round:
            _sweep(series, series.higher_seed_team_id)
        assert not bracket.try_advance_round()
        assert bracket.current_phase == PlayoffPhase.FIRST_ROUND
        assert bracket.eastern.conference_semis == []

        for series in bracket.western.first_round:
            _sweep(series, series.higher_seed_team_id)
        assert bracket.try_advance_round()
        assert bracket.current_phase == PlayoffPhase.CONFERENCE_SEMIS
        assert len(bracket.eastern.conference_semis) == 2
        assert len(bracket.western.conference_semis) == 2
        assert not bracket.try_advance_round()

    def test_finals_home_court_to_better_record(self, east_standings, west_standings):
        bracket = _new_bracket(east_standings, west_standings)
        for _ in range(3):
            _chalk_round(bracket)
            assert bracket.try_advance_round()

        assert bracket.current_phase == PlayoffPhase.FINALS
        finals = bracket.finals
        assert finals is not None
        assert finals.series_id == "FINALS_2025"
        assert finals.conference == "Finals"
        # W1 (63 wins) outranks E1 (60 wins).
        assert finals.higher_seed_team_id == "W1"
        assert finals.home_team_for_game(1) == "W1"

    def test_finals_tie_goes_to_east(self, standings_factory):
        east = standings_factory("E", "Eastern", top_wins=60)
        west = standings_factory("W", "Western", top_wins=60)
        bracket = _new_bracket(east, west)
        for _ in range(3):
            _chalk_round(bracket)
            bracket.try_advance_round()
        assert bracket.finals is not None
        assert bracket.finals.higher_seed_team_id == "E1"

    def test_finals_completion_crowns_champion(self, east_standings, west_standings):
        bracket = _new_bracket(east_standings, west_standings)
        for _ in range(3):
            _chalk_round(bracket)
            bracket.try_advance_round()

        _sweep(bracket.finals, "E1")
        assert bracket.try_advance_round()
        assert bracket.is_complete
        assert bracket.champion_team_id == "E1"
        assert bracket.finals_runner_up_team_id == "W1"
        assert not bracket.try_advance_round()
        assert bracket.get_active_series() == []
        # Seven series per conference plus the Finals.
        assert len(bracket.all_series()) == 15
