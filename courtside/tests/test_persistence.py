"""
Persistence: state snapshots and the sqlite repositories.
"""
from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.config import DeuceType, GameConfig, GameMode, RotationMode
from courtside.engine import actions as a
from courtside.engine import reduce
from courtside.engine.state import initial_state
from courtside.models import Player, PlayerRole, Team, TeamSide
from courtside.persistence import (
    MatchRepository,
    ProfileRepository,
    get_connection,
    init_db,
    state_from_dict,
    state_to_dict,
)
from courtside.persistence.snapshots import SNAPSHOT_VERSION, dumps, loads
from courtside.profiles import PlayerProfile


def P(pid: str, **kw) -> Player:
    return Player(id=pid, name=pid, **kw)


@pytest.fixture
def played_state():
    """A state with logs, a finished set, a queue and a deleted player."""
    config = GameConfig(mode=GameMode.BEACH, preset="beach-2v2", max_sets=3, deuce_type=DeuceType.SUDDEN_DEATH_3PT)
    state = initial_state(config, game_id="g1", now=0.0)
    state = replace(
        state,
        team_a=Team(id="ta", name="Home", players=(P("a1", number="1"), P("a2", role=PlayerRole.SETTER))),
        team_b=Team(id="tb", name="Guest", players=(P("b1"), P("b2")), reserves=(P("b3"),), has_active_bench=True),
        queue=(Team(id="q1", name="Team 1", players=(P("c1"), P("c2"))),),
        rotation_mode=RotationMode.BALANCED,
        score_a=24,
    )
    actions = [a.ScorePoint(TeamSide.A)] + [a.ScorePoint(TeamSide.B)] * 2 + [
        a.RequestTimeout(TeamSide.A),
        a.ManualRotation(TeamSide.B),
        a.DeletePlayer("b3"),
    ]
    for action in actions:
        state, result = reduce(state, action, now=1.0)
        assert result.ok
    return state


def test_state_round_trip(played_state):
    assert played_state.last_snapshot is not None
    assert played_state.rotation_report is not None
    assert state_from_dict(state_to_dict(played_state)) == played_state


def test_dumps_is_plain_json(played_state):
    raw = dumps(played_state)
    data = json.loads(raw)
    assert data["version"] == SNAPSHOT_VERSION
    assert data["action_log"][-1]["type"] == "MANUAL_ROTATION"
    assert loads(raw) == played_state


def test_undo_after_reload(played_state):
    reloaded = loads(dumps(played_state))
    expected, _ = reduce(played_state, a.Undo())
    actual, _ = reduce(reloaded, a.Undo())
    assert actual == expected


def test_match_repository(tmp_path, played_state):
    db_path = tmp_path / "test.db"
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        repo = MatchRepository()
        assert repo.save(conn, played_state) == "g1"
        assert repo.get(conn, "g1") == played_state
        later = replace(played_state, score_b=9)
        repo.save(conn, later)
        assert repo.get(conn, "g1").score_b == 9
        rows = repo.list_recent(conn)
        assert [r["id"] for r in rows] == ["g1"]
        assert rows[0]["is_match_over"] is False
        assert repo.get(conn, "missing") is None
        assert repo.delete(conn, "g1")
        assert not repo.delete(conn, "g1")
    finally:
        conn.close()


def test_profile_repository(tmp_path):
    db_path = tmp_path / "test.db"
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        repo = ProfileRepository()
        repo.upsert(conn, PlayerProfile(id="p2", name="bruno", skill_level=4))
        repo.upsert(conn, PlayerProfile(id="p1", name="Ana", skill_level=7, number="9", role=PlayerRole.LIBERO))
        assert [p.id for p in repo.list_all(conn)] == ["p1", "p2"]
        assert repo.get(conn, "p1").role == PlayerRole.LIBERO
        repo.upsert(conn, PlayerProfile(id="p1", name="Ana", skill_level=8))
        assert repo.get(conn, "p1").skill_level == 8
        store = repo.load_store(conn)
        assert store.find_by_name("BRUNO").id == "p2"
        assert repo.delete(conn, "p2")
        assert repo.get(conn, "p2") is None
    finally:
        conn.close()
