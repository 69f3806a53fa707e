"""
Undo: inverse of each logged action, boundary snapshots, LIFO order.
"""
from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.config import DeuceType, GameConfig, GameMode
from courtside.engine import actions as a
from courtside.engine import reduce
from courtside.engine.state import GameState, initial_state
from courtside.engine.undo import entry_from_dict, last_scorer
from courtside.models import Direction, Player, Reason, Team, TeamSide

A, B = TeamSide.A, TeamSide.B


def P(pid: str) -> Player:
    return Player(id=pid, name=pid)


def make_state(config: GameConfig | None = None, queue=(), **fields) -> GameState:
    state = initial_state(config, game_id="g1", now=0.0)
    team_a = Team(id="ta", name="Home", players=(P("a1"), P("a2"), P("a3")))
    team_b = Team(id="tb", name="Guest", players=(P("b1"), P("b2"), P("b3")))
    return replace(state, team_a=team_a, team_b=team_b, queue=tuple(queue), **fields)


def step(state: GameState, action) -> GameState:
    state, result = reduce(state, action, now=1.0)
    assert result.ok
    return state


def undo(state: GameState) -> GameState:
    return step(state, a.Undo())


def test_nothing_to_undo():
    state = make_state()
    assert not state.can_undo()
    new, result = reduce(state, a.Undo())
    assert result.reason == Reason.NOTHING_TO_UNDO
    assert new is state


def test_point_undo_restores_prior_state():
    before = make_state()
    after = step(before, a.ScorePoint(A))
    new, result = reduce(after, a.Undo())
    assert result.details["undone"] == "POINT"
    assert new == before


def test_side_out_undo_reverses_rotation_and_offset():
    before = make_state(serving_team=A)
    before = before.with_team(B, replace(before.team_b, tactical_offset=1))
    after = step(before, a.ScorePoint(B))
    assert [p.id for p in after.team_b.players] == ["b3", "b1", "b2"]
    restored = undo(after)
    assert restored == before
    assert restored.team_b.tactical_offset == 1


def test_sudden_death_entry_undone():
    before = make_state(GameConfig(deuce_type=DeuceType.SUDDEN_DEATH_3PT), score_a=24, score_b=23)
    after = step(before, a.ScorePoint(B))
    assert after.in_sudden_death
    assert undo(after) == before


def test_timeout_undo():
    before = make_state(timeouts_b=1)
    after = step(before, a.RequestTimeout(B))
    assert undo(after) == before


def test_manual_rotation_undo_applies_inverse_direction():
    before = make_state()
    after = step(before, a.ManualRotation(A, Direction.COUNTER))
    assert after.team_a.tactical_offset == 2
    assert undo(after) == before


def test_lifo_over_mixed_actions():
    start = make_state(serving_team=A)
    state = step(start, a.ScorePoint(A))
    state = step(state, a.RequestTimeout(B))
    state = step(state, a.ManualRotation(A))
    state = step(state, a.ScorePoint(B))
    assert len(state.match_log) == 4
    undone = []
    for _ in range(4):
        state, result = reduce(state, a.Undo())
        undone.append(result.details["undone"])
    assert undone == ["POINT", "MANUAL_ROTATION", "TIMEOUT", "POINT"]
    assert state == start


def test_last_scorer_follows_the_log():
    state = step(make_state(), a.ScorePoint(A))
    state = step(state, a.ScorePoint(B))
    assert state.last_scorer_team == B
    state = undo(state)
    assert state.last_scorer_team == A
    assert last_scorer(state.match_log) == A


def test_set_boundary_restores_snapshot():
    before = make_state(score_a=24, score_b=20)
    after = step(before, a.ScorePoint(A))
    assert after.sets_a == 1
    assert after.can_undo()
    new, result = reduce(after, a.Undo())
    assert result.details["undone"] == "SNAPSHOT"
    assert new is before


def test_snapshots_chain_across_sets():
    first = make_state(score_a=24)
    set_one = step(first, a.ScorePoint(A))
    second = replace(set_one, score_b=24)
    set_two = step(second, a.ScorePoint(B))
    assert (set_two.sets_a, set_two.sets_b) == (1, 1)
    assert undo(set_two) is second
    assert undo(second) is first


def test_points_in_new_set_undo_before_snapshot():
    set_one = step(make_state(score_a=24), a.ScorePoint(A))
    state = step(set_one, a.ScorePoint(B))
    assert undo(state) == set_one


def test_advance_then_undo_restores_rosters():
    queue = (Team(id="tc", name="Next", players=(P("c1"), P("c2"), P("c3"))),)
    config = GameConfig(mode=GameMode.BEACH, preset="triples-3v3", max_sets=1)
    decided = step(make_state(config, score_a=24, queue=queue), a.ScorePoint(A))
    assert decided.is_match_over
    advanced = step(decided, a.AdvanceToNextGame())
    assert advanced.team_b.id == "tc"
    assert [t.id for t in advanced.queue] == ["tb"]
    assert advanced.rotation_report is not None
    assert advanced.score_a == 0
    assert not advanced.is_match_over

    restored, result = reduce(advanced, a.Undo())
    assert result.details["undone"] == "ROTATION"
    assert restored.team_a == decided.team_a
    assert restored.team_b == decided.team_b
    assert restored.queue == decided.queue
    assert restored.rotation_report == decided.rotation_report
    assert restored.score_a == 0
    _, again = reduce(restored, a.Undo())
    assert again.reason == Reason.NOTHING_TO_UNDO


def test_unknown_entry_type_rejected():
    with pytest.raises(ValueError):
        entry_from_dict({"type": "SUBSTITUTION"})
