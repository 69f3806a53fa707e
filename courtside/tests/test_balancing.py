"""
Balancing: standard (restore order) and snake (skill-weighted) distribution.
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.engine.balancing import balance_snake, distribute_standard
from courtside.engine.lineup import Lineup
from courtside.models import Player, Team


def P(pid: str, skill: int = 5, idx: int = 0, number: str | None = None, fixed: bool = False) -> Player:
    return Player(id=pid, name=pid, skill_level=skill, original_index=idx, number=number, is_fixed=fixed)


def T(tid: str, players=(), reserves=(), name: str | None = None) -> Team:
    return Team(id=tid, name=name or tid, players=tuple(players), reserves=tuple(reserves))


def partition(lineup: Lineup) -> list[list[str]]:
    return [[p.id for p in t.players] for t in lineup.teams()]


def courts(*players: Player) -> Lineup:
    half = len(players) // 2
    return Lineup(T("ta", players[:half]), T("tb", players[half:]))


class TestStandardDistribution:
    def test_restores_insertion_order(self):
        pool = [P("p3", idx=3), P("p0", idx=0), P("p4", idx=4), P("p1", idx=1), P("p2", idx=2)]
        result = distribute_standard(pool, courts(*pool), 2)
        assert partition(result.lineup) == [["p0", "p1"], ["p2", "p3"], ["p4"]]
        assert result.lineup.queue[0].name == "Team 1"

    def test_fixed_player_stays_in_current_bucket(self):
        fixed = P("f", idx=0, fixed=True)
        pool = [P("p1", idx=1), P("p2", idx=2), fixed]
        structure = Lineup(T("ta", [pool[0], pool[1]]), T("tb", [fixed]))
        result = distribute_standard(pool, structure, 2)
        assert "f" in [p.id for p in result.lineup.court_b.players]

    def test_fixed_player_outside_main_rosters_joins_pool(self):
        fixed = P("f", idx=0, fixed=True)
        result = distribute_standard([fixed, P("p1", idx=1)], Lineup(T("ta"), T("tb")), 2)
        assert partition(result.lineup)[0] == ["f", "p1"]

    def test_number_clash_skips_to_next_bucket(self):
        pool = [P("p0", idx=0, number="7"), P("p1", idx=1, number="7"), P("p2", idx=2), P("p3", idx=3)]
        result = distribute_standard(pool, courts(*pool), 2)
        assert partition(result.lineup) == [["p0", "p2"], ["p1", "p3"]]

    def test_court_reserves_count_for_number_clash(self):
        structure = Lineup(T("ta", [], [P("r", number="5")]), T("tb"))
        result = distribute_standard([P("p0", idx=0, number="5"), P("p1", idx=1)], structure, 2)
        assert partition(result.lineup) == [["p1"], ["p0"]]
        assert [p.id for p in result.lineup.court_a.reserves] == ["r"]

    def test_reuses_queue_team_identity(self):
        queue_team = T("q1", [P("p4", idx=4)], name="Sharks")
        pool = [P(f"p{i}", idx=i) for i in range(5)]
        structure = Lineup(T("ta", pool[:2]), T("tb", pool[2:4]), (queue_team,))
        result = distribute_standard(pool, structure, 2)
        assert result.lineup.queue[0].id == "q1"
        assert result.lineup.queue[0].name == "Sharks"

    def test_empty_queue_bucket_dropped_unless_it_has_reserves(self):
        pool = [P("p0", idx=0), P("p1", idx=1)]
        keep = T("q1", [], [P("r1")])
        drop = T("q2")
        structure = Lineup(T("ta", pool), T("tb"), (keep, drop))
        result = distribute_standard(pool, structure, 2)
        assert [t.id for t in result.lineup.queue] == ["q1"]

    def test_idempotent(self):
        pool = [P(f"p{i}", idx=(i * 7) % 9) for i in range(9)]
        first = distribute_standard(pool, courts(*pool), 4).lineup
        second = distribute_standard(first.main_roster_players(), first, 4).lineup
        assert partition(first) == partition(second)


class TestSnakeDistribution:
    def test_balances_totals(self):
        pool = [P("a", 9, 0), P("b", 7, 1), P("c", 5, 2), P("d", 3, 3)]
        result = balance_snake(pool, courts(*pool), 2)
        assert partition(result.lineup) == [["a", "d"], ["b", "c"]]
        assert result.lineup.court_a.total_skill() == result.lineup.court_b.total_skill() == 12

    def test_overflow_goes_to_queue(self):
        pool = [P("a", 9, 0), P("b", 8, 1), P("c", 7, 2), P("d", 6, 3), P("e", 5, 4)]
        result = balance_snake(pool, courts(*pool), 2)
        assert partition(result.lineup) == [["a", "d"], ["b", "c"], ["e"]]

    def test_never_exceeds_capacity_and_conserves(self):
        pool = [P(f"p{i}", skill=(i % 10) + 1, idx=i) for i in range(17)]
        result = balance_snake(pool, courts(*pool), 4)
        assert all(len(t.players) <= 4 for t in result.lineup.teams())
        assert sorted(result.lineup.player_ids()) == sorted(p.id for p in pool)

    def test_fixed_players_not_moved(self):
        anchor = P("anchor", 10, 0, fixed=True)
        pool = [P("x", 9, 1), P("y", 8, 2), P("z", 1, 3), anchor]
        structure = Lineup(T("ta", pool[:2]), T("tb", [pool[2], anchor]))
        result = balance_snake(pool, structure, 2)
        assert "anchor" in [p.id for p in result.lineup.court_b.players]

    def test_idempotent(self):
        pool = [P(f"p{i}", skill=(i * 3) % 10 + 1, idx=i) for i in range(10)]
        first = balance_snake(pool, courts(*pool), 3).lineup
        second = balance_snake(first.main_roster_players(), first, 3).lineup
        assert partition(first) == partition(second)

    def test_resets_tactical_offset(self):
        pool = [P("a", 9), P("b", 1)]
        structure = Lineup(Team(id="ta", name="ta", players=tuple(pool), tactical_offset=1), T("tb"))
        result = balance_snake(pool, structure, 2)
        assert result.lineup.court_a.tactical_offset == 0
