"""
Tests for the pairing strategies: elimination fold, round robin, leaderboard,
first-round Swiss, and simple sequential pairing.
"""

from datetime import datetime, timedelta
from itertools import combinations

import pytest

from app.services.pairing_algorithms import (
    MatchFormat,
    generate_elimination_pairs,
    generate_leaderboard_pairs,
    generate_pairs,
    generate_round_robin_pairs,
    generate_simple_pairs,
    generate_swiss_pairs,
)
from app.services.seeding_resolver import PlayerEntry

T0 = datetime(2026, 3, 1, 9, 0, 0)


def _players(n: int) -> list[PlayerEntry]:
    """Helper: n players already in seed order, ids s1..sn."""
    return [PlayerEntry(external_id=f"s{i}", name=f"Seed {i}", joined_at=T0 + timedelta(minutes=i)) for i in range(1, n + 1)]


def _id_pairs(pairs) -> list[tuple[str, str]]:
    return [(p.player1_id, p.player2_id) for p in pairs]


class TestElimination:
    def test_five_players_fold_with_middle_bye(self):
        pairs, meta = generate_elimination_pairs(_players(5), "SINGLE_ELIMINATION_1V1")
        assert _id_pairs(pairs) == [("s1", "s5"), ("s2", "s4")]
        assert [p.match_number for p in pairs] == [1, 2]
        assert all(p.round_number == 1 for p in pairs)
        assert meta["has_bye"] is True
        assert meta["bye_player"] == {"id": "s3", "name": "Seed 3"}
        assert meta["bracket_type"] == "SINGLE_ELIMINATION_1V1"
        assert meta["total_players"] == 5

    def test_even_count_has_no_bye(self):
        pairs, meta = generate_elimination_pairs(_players(8), "DOUBLE_ELIMINATION_1V1")
        assert _id_pairs(pairs) == [("s1", "s8"), ("s2", "s7"), ("s3", "s6"), ("s4", "s5")]
        assert meta["has_bye"] is False
        assert meta["bye_player"] is None

    @pytest.mark.parametrize("n", [2, 3, 4, 7, 16, 33])
    def test_pair_count_and_bye_rule(self, n):
        players = _players(n)
        pairs, meta = generate_elimination_pairs(players, "SINGLE_ELIMINATION_1V1")
        assert len(pairs) == n // 2
        assert meta["has_bye"] == (n % 2 == 1)
        if n % 2:
            assert meta["bye_player"]["id"] == players[n // 2].external_id
            paired = {pid for pair in _id_pairs(pairs) for pid in pair}
            assert players[n // 2].external_id not in paired


class TestRoundRobin:
    def test_four_players_six_pairs(self):
        pairs, meta = generate_round_robin_pairs(_players(4))
        assert _id_pairs(pairs) == [
            ("s1", "s2"),
            ("s1", "s3"),
            ("s1", "s4"),
            ("s2", "s3"),
            ("s2", "s4"),
            ("s3", "s4"),
        ]
        assert [p.match_number for p in pairs] == [1, 2, 3, 4, 5, 6]
        assert meta["total_matches"] == 6
        assert meta["rounds_needed"] == 3

    @pytest.mark.parametrize("n", [2, 3, 5, 6, 9])
    def test_every_unordered_pair_once(self, n):
        players = _players(n)
        pairs, meta = generate_round_robin_pairs(players)
        assert len(pairs) == n * (n - 1) // 2
        seen = [frozenset(pair) for pair in _id_pairs(pairs)]
        expected = {frozenset((a.external_id, b.external_id)) for a, b in combinations(players, 2)}
        assert len(set(seen)) == len(seen)
        assert set(seen) == expected
        assert meta["rounds_needed"] == n - 1 + n % 2


class TestLeaderboard:
    def test_small_field_uses_round_robin(self):
        pairs, meta = generate_leaderboard_pairs(_players(8))
        assert len(pairs) == 28
        assert meta["format"] == "round_robin"

    def test_large_field_plays_simultaneously(self):
        pairs, meta = generate_leaderboard_pairs(_players(9))
        assert pairs == []
        assert meta["simultaneous"] is True
        assert meta["scoring_type"] == "individual"
        assert meta["total_players"] == 9


class TestSwiss:
    def test_top_half_vs_bottom_half(self):
        pairs, meta = generate_swiss_pairs(_players(6))
        assert _id_pairs(pairs) == [("s1", "s4"), ("s2", "s5"), ("s3", "s6")]
        assert all(p.round_number == 1 for p in pairs)
        assert meta["pairing_rule"] == "top_vs_bottom"
        assert meta["round"] == 1

    def test_odd_count_leaves_last_player_out(self):
        pairs, meta = generate_swiss_pairs(_players(5))
        assert _id_pairs(pairs) == [("s1", "s3"), ("s2", "s4")]
        assert meta["has_bye"] is True


class TestSimple:
    def test_consecutive_pairs(self):
        pairs, meta = generate_simple_pairs(_players(4))
        assert _id_pairs(pairs) == [("s1", "s2"), ("s3", "s4")]
        assert [p.match_number for p in pairs] == [1, 2]
        assert meta["has_bye"] is False

    @pytest.mark.parametrize("n", [2, 3, 6, 7])
    def test_last_player_bye_when_odd(self, n):
        players = _players(n)
        pairs, meta = generate_simple_pairs(players)
        assert len(pairs) == n // 2
        assert meta["has_bye"] == (n % 2 == 1)
        if n % 2:
            paired = {pid for pair in _id_pairs(pairs) for pid in pair}
            assert players[-1].external_id not in paired


class TestDispatch:
    def test_unknown_match_type_falls_back_to_simple(self):
        assert MatchFormat.from_match_type("TEAM_BATTLE_ROYALE") == MatchFormat.SIMPLE
        assert MatchFormat.from_match_type(None) == MatchFormat.SIMPLE

    def test_match_type_is_case_insensitive(self):
        assert MatchFormat.from_match_type("round_robin_1v1") == MatchFormat.ROUND_ROBIN_1V1

    @pytest.mark.parametrize(
        "fmt,expected_pairs",
        [
            (MatchFormat.SINGLE_ELIMINATION_1V1, [("s1", "s4"), ("s2", "s3")]),
            (MatchFormat.DOUBLE_ELIMINATION_1V1, [("s1", "s4"), ("s2", "s3")]),
            (MatchFormat.SWISS_SYSTEM, [("s1", "s3"), ("s2", "s4")]),
            (MatchFormat.SIMPLE, [("s1", "s2"), ("s3", "s4")]),
        ],
    )
    def test_dispatch_by_format(self, fmt, expected_pairs):
        pairs, _ = generate_pairs(fmt, _players(4))
        assert _id_pairs(pairs) == expected_pairs

    def test_every_format_is_registered(self):
        for fmt in MatchFormat:
            pairs, meta = generate_pairs(fmt, _players(4))
            assert isinstance(meta, dict)
