"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from courtside.api import app
from courtside.persistence.db import init_db, set_db_path


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Use a temporary DB for each test."""
    db_path = tmp_path / "test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    yield db_path


@pytest.fixture
def client():
    return TestClient(app)


def _create(client, **body) -> str:
    resp = client.post("/matches", json=body)
    assert resp.status_code == 201
    return resp.json()["match_id"]


def _act(client, match_id: str, kind: str, **payload):
    return client.post(f"/matches/{match_id}/actions", json={"type": kind, "payload": payload})


def test_health_and_catalogue(client):
    assert client.get("/health").json() == {"status": "ok"}
    presets = {p["name"]: p for p in client.get("/presets").json()}
    assert presets["beach-4v4"]["players_on_court"] == 4
    actions = client.get("/actions").json()
    assert "score_point" in actions
    assert "load_state" not in actions


def test_create_and_get_match(client):
    match_id = _create(client, mode="beach", team_a_name="Sharks")
    resp = client.get(f"/matches/{match_id}")
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert state["config"]["preset"] == "beach-4v4"
    assert state["team_a"]["name"] == "Sharks"
    listed = client.get("/matches").json()
    assert [m["id"] for m in listed] == [match_id]


def test_create_match_unknown_preset(client):
    resp = client.post("/matches", json={"preset": "quidditch"})
    assert resp.status_code == 400


def test_get_match_not_found(client):
    assert client.get("/matches/nope").status_code == 404


def test_score_and_undo_persist(client):
    match_id = _create(client)
    resp = _act(client, match_id, "score_point", team="A")
    assert resp.status_code == 200
    body = resp.json()
    assert body["result"]["ok"] is True
    assert body["state"]["score_a"] == 1
    assert client.get(f"/matches/{match_id}").json()["state"]["score_a"] == 1

    resp = _act(client, match_id, "undo")
    assert resp.json()["result"]["details"]["undone"] == "POINT"
    assert client.get(f"/matches/{match_id}").json()["state"]["score_a"] == 0


def test_rejection_is_not_an_http_error(client):
    match_id = _create(client)
    resp = _act(client, match_id, "subtract_point", team="B")
    assert resp.status_code == 200
    assert resp.json()["result"] == {"ok": False, "reason": "score_at_zero"}


def test_bad_action_is_400(client):
    match_id = _create(client)
    assert _act(client, match_id, "teleport").status_code == 400
    assert _act(client, match_id, "score_point", team="Z").status_code == 400
    assert _act(client, match_id, "score_point", team="A", extra=1).status_code == 400


def test_action_on_missing_match(client):
    assert _act(client, "nope", "undo").status_code == 404


def test_add_player_and_conflict(client):
    match_id = _create(client)
    resp = client.post(f"/matches/{match_id}/players", json={"name": "Ana", "number": "7"})
    assert resp.json()["result"]["ok"] is True
    resp = client.post(f"/matches/{match_id}/players", json={"name": "Bruno", "number": "7"})
    result = resp.json()["result"]
    assert result["reason"] == "number_conflict"
    assert result["conflict_name"] == "Ana"
    players = client.get(f"/matches/{match_id}").json()["state"]["team_a"]["players"]
    assert [p["name"] for p in players] == ["Ana"]


def test_generate_teams(client):
    match_id = _create(client, mode="beach", preset="beach-2v2")
    resp = client.post(f"/matches/{match_id}/generate", json={"lines": ["1 Ana 5", "2 Bruno", "Carla 7"]})
    state = resp.json()["state"]
    assert [p["name"] for p in state["team_a"]["players"]] == ["Ana", "Bruno"]
    assert [p["name"] for p in state["team_b"]["players"]] == ["Carla"]


def test_save_player_profile(client):
    match_id = _create(client)
    added = client.post(f"/matches/{match_id}/players", json={"name": "Ana", "skill_level": 8}).json()
    player_id = added["result"]["details"]["player_id"]
    resp = client.post(f"/matches/{match_id}/players/{player_id}/profile")
    assert resp.status_code == 200
    profile = resp.json()["profile"]
    assert profile["skill_level"] == 8
    assert resp.json()["state"]["team_a"]["players"][0]["profile_id"] == profile["id"]
    assert [p["id"] for p in client.get("/profiles").json()] == [profile["id"]]
    assert client.post(f"/matches/{match_id}/players/ghost/profile").status_code == 404


def test_profiles_crud(client):
    resp = client.post("/profiles", json={"name": "Carla", "skill_level": 6, "role": "libero"})
    assert resp.status_code == 201
    profile_id = resp.json()["id"]
    assert client.get(f"/profiles/{profile_id}").json()["role"] == "libero"
    assert client.delete(f"/profiles/{profile_id}").status_code == 204
    assert client.get(f"/profiles/{profile_id}").status_code == 404
    assert client.delete(f"/profiles/{profile_id}").status_code == 404


def test_delete_match(client):
    match_id = _create(client)
    assert client.delete(f"/matches/{match_id}").status_code == 204
    assert client.delete(f"/matches/{match_id}").status_code == 404
