"""
Winner-stays rotation: queue order, roster filling by stealing, disbanding.
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.config import RotationMode
from courtside.engine.lineup import Lineup
from courtside.engine.rotation import handle_rotate, rotate
from courtside.models import Player, Team, TeamSide


def P(pid: str, skill: int = 5, fixed: bool = False, number: str | None = None) -> Player:
    return Player(id=pid, name=pid, skill_level=skill, is_fixed=fixed, number=number)


def team(tid: str, size: int, skill: int = 5, reserves=()) -> Team:
    return Team(
        id=tid,
        name=tid.upper(),
        players=tuple(P(f"{tid}{i}", skill) for i in range(1, size + 1)),
        reserves=tuple(reserves),
    )


def names(players) -> list[str]:
    return [p.id for p in players]


class TestRotateStandard:
    def test_empty_queue_loser_returns(self):
        a, b = team("a", 6), team("b", 6)
        report = rotate(a, b, (), RotationMode.STANDARD, 6)
        assert report.incoming_team.id == "b"
        assert report.queue_after_rotation == ()
        assert report.stolen_players == ()

    def test_steals_tail_players_from_donor(self):
        a, b = team("a", 6), team("b", 6)
        c, d = team("c", 4), team("d", 6)
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 6)
        assert report.incoming_team.id == "c"
        assert names(report.incoming_team.players) == ["c1", "c2", "c3", "c4", "d6", "d5"]
        assert names(report.stolen_players) == ["d6", "d5"]
        assert [t.id for t in report.queue_after_rotation] == ["d", "b"]
        assert names(report.queue_after_rotation[0].players) == ["d1", "d2", "d3", "d4"]
        assert report.outgoing_team == b

    def test_fixed_players_are_skipped(self):
        a, b, c = team("a", 6), team("b", 6), team("c", 4)
        d = Team(id="d", name="D", players=tuple(P(f"d{i}", fixed=(i == 6)) for i in range(1, 7)))
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 6)
        assert names(report.stolen_players) == ["d5", "d4"]
        assert "d6" in names(report.queue_after_rotation[0].players)

    def test_retained_lists_fixed_incoming_players(self):
        a, b = team("a", 2), team("b", 2)
        c = Team(id="c", name="C", players=(P("c1", fixed=True), P("c2")))
        report = rotate(a, b, (c,), RotationMode.STANDARD, 2)
        assert names(report.retained_players) == ["c1"]

    def test_number_clash_candidate_skipped(self):
        a, b = team("a", 2), team("b", 2)
        c = Team(id="c", name="C", players=(P("c1", number="9"),))
        d = Team(id="d", name="D", players=(P("d1"), P("d2", number="9")))
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 2)
        assert names(report.stolen_players) == ["d1"]

    def test_empty_donor_disbanded(self):
        a, b = team("a", 3), team("b", 3)
        c, d = team("c", 1), team("d", 1)
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 3)
        assert names(report.incoming_team.players) == ["c1", "d1", "b3"]
        assert [t.id for t in report.queue_after_rotation] == ["b"]
        assert any("Disbanded" in line for line in report.logs)

    def test_donor_with_reserves_survives(self):
        a, b = team("a", 2), team("b", 2)
        c = team("c", 1)
        d = team("d", 1, reserves=(P("dr"),))
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 2)
        assert [t.id for t in report.queue_after_rotation] == ["d", "b"]

    def test_incoming_offset_reset(self):
        a, b = team("a", 2), team("b", 2)
        c = Team(id="c", name="C", players=(P("c1"), P("c2")), tactical_offset=1)
        report = rotate(a, b, (c,), RotationMode.STANDARD, 2)
        assert report.incoming_team.tactical_offset == 0

    def test_conserves_players(self):
        a, b, c, d = team("a", 6), team("b", 6), team("c", 4), team("d", 5)
        report = rotate(a, b, (c, d), RotationMode.STANDARD, 6)
        before = sorted(names(a.players + b.players + c.players + d.players))
        after = names(a.players + report.incoming_team.players)
        for t in report.queue_after_rotation:
            after += names(t.players)
        assert sorted(after) == before


class TestRotateBalanced:
    def test_picks_candidate_closest_to_winner_average(self):
        winner = team("a", 3, skill=8)
        loser = team("b", 3)
        c = Team(id="c", name="C", players=(P("c1", 5), P("c2", 5)))
        d = Team(id="d", name="D", players=(P("d1", 10), P("d2", 8), P("d3", 2)))
        report = rotate(winner, loser, (c, d), RotationMode.BALANCED, 3)
        assert names(report.stolen_players) == ["d1"]

    def test_greedy_takes_best_n_independently(self):
        winner = team("a", 4, skill=6)
        loser = team("b", 4, skill=1)
        c = Team(id="c", name="C", players=(P("c1", 6), P("c2", 6)))
        d = Team(id="d", name="D", players=(P("d1", 1), P("d2", 6), P("d3", 7), P("d4", 10)))
        report = rotate(winner, loser, (c, d), RotationMode.BALANCED, 4)
        assert names(report.stolen_players) == ["d2", "d3"]


class TestHandleRotate:
    def test_noop_when_queue_empty_and_courts_full(self):
        lineup = Lineup(team("a", 2), team("b", 2))
        new, report = handle_rotate(lineup, TeamSide.A, RotationMode.STANDARD, 2)
        assert report is None
        assert new is lineup

    def test_winner_b_keeps_court_b(self):
        lineup = Lineup(team("a", 2), team("b", 2), (team("c", 2),))
        new, report = handle_rotate(lineup, TeamSide.B, RotationMode.STANDARD, 2)
        assert new.court_b.id == "b"
        assert new.court_a.id == "c"
        assert [t.id for t in new.queue] == ["a"]
        assert report.outgoing_team.id == "a"
