"""
GameState <-> JSON-safe dict. The persisted-state boundary: round-trips
every field, including the undo logs and the chain of boundary snapshots.
"""
from __future__ import annotations

import json
from typing import Any

from courtside.config import GameConfig, RotationMode
from courtside.engine.state import GameState
from courtside.engine.undo import entry_from_dict, entry_to_dict
from courtside.models import DeletedPlayerRecord, RotationReport, SetHistory, Team, TeamSide

SNAPSHOT_VERSION = 1


def _side(value: str | None) -> TeamSide | None:
    return TeamSide(value) if value else None


def state_to_dict(state: GameState) -> dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "game_id": state.game_id,
        "created_at": state.created_at,
        "team_a": state.team_a.to_dict(),
        "team_b": state.team_b.to_dict(),
        "queue": [t.to_dict() for t in state.queue],
        "config": state.config.to_dict(),
        "rotation_mode": state.rotation_mode.value,
        "score_a": state.score_a,
        "score_b": state.score_b,
        "sets_a": state.sets_a,
        "sets_b": state.sets_b,
        "current_set": state.current_set,
        "history": [h.to_dict() for h in state.history],
        "action_log": [entry_to_dict(e) for e in state.action_log],
        "match_log": [entry_to_dict(e) for e in state.match_log],
        "last_snapshot": state_to_dict(state.last_snapshot) if state.last_snapshot else None,
        "last_scorer_team": state.last_scorer_team.value if state.last_scorer_team else None,
        "is_match_over": state.is_match_over,
        "match_winner": state.match_winner.value if state.match_winner else None,
        "serving_team": state.serving_team.value if state.serving_team else None,
        "swapped_sides": state.swapped_sides,
        "pending_side_switch": state.pending_side_switch,
        "timeouts_a": state.timeouts_a,
        "timeouts_b": state.timeouts_b,
        "in_sudden_death": state.in_sudden_death,
        "match_duration_seconds": state.match_duration_seconds,
        "rotation_report": state.rotation_report.to_dict() if state.rotation_report else None,
        "deleted_player_history": [r.to_dict() for r in state.deleted_player_history],
    }


def state_from_dict(d: dict[str, Any]) -> GameState:
    snapshot = d.get("last_snapshot")
    report = d.get("rotation_report")
    return GameState(
        game_id=d["game_id"],
        created_at=d.get("created_at", 0.0),
        team_a=Team.from_dict(d["team_a"]),
        team_b=Team.from_dict(d["team_b"]),
        queue=tuple(Team.from_dict(t) for t in d.get("queue", [])),
        config=GameConfig.from_dict(d.get("config", {})),
        rotation_mode=RotationMode(d.get("rotation_mode", RotationMode.STANDARD.value)),
        score_a=d.get("score_a", 0),
        score_b=d.get("score_b", 0),
        sets_a=d.get("sets_a", 0),
        sets_b=d.get("sets_b", 0),
        current_set=d.get("current_set", 1),
        history=tuple(SetHistory.from_dict(h) for h in d.get("history", [])),
        action_log=tuple(entry_from_dict(e) for e in d.get("action_log", [])),
        match_log=tuple(entry_from_dict(e) for e in d.get("match_log", [])),
        last_snapshot=state_from_dict(snapshot) if snapshot else None,
        last_scorer_team=_side(d.get("last_scorer_team")),
        is_match_over=d.get("is_match_over", False),
        match_winner=_side(d.get("match_winner")),
        serving_team=_side(d.get("serving_team")),
        swapped_sides=d.get("swapped_sides", False),
        pending_side_switch=d.get("pending_side_switch", False),
        timeouts_a=d.get("timeouts_a", 0),
        timeouts_b=d.get("timeouts_b", 0),
        in_sudden_death=d.get("in_sudden_death", False),
        match_duration_seconds=d.get("match_duration_seconds", 0),
        rotation_report=RotationReport.from_dict(report) if report else None,
        deleted_player_history=tuple(
            DeletedPlayerRecord.from_dict(r) for r in d.get("deleted_player_history", [])
        ),
    )


def dumps(state: GameState) -> str:
    return json.dumps(state_to_dict(state))


def loads(raw: str) -> GameState:
    return state_from_dict(json.loads(raw))
