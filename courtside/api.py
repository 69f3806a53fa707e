"""
REST API for the courtside scorekeeper.
Thin wrappers: load a session, dispatch, save. No game rules here.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from courtside.config import PRESETS, DeuceType, GameConfig, GameMode, preset_for
from courtside.engine.actions import ACTION_TYPES, action_from_payload
from courtside.engine.state import initial_state
from courtside.models import PlayerRole
from courtside.persistence import (
    MatchRepository,
    ProfileRepository,
    get_connection,
    get_db_path,
    init_db,
    state_to_dict,
)
from courtside.profiles import new_profile
from courtside.services import MatchSession

logger = logging.getLogger(__name__)

match_repo = MatchRepository()
profile_repo = ProfileRepository()


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db(db_path=get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Courtside API",
    description="Volleyball scorekeeping and team rotation",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request/Response models ----------
class CreateMatchRequest(BaseModel):
    mode: GameMode = GameMode.INDOOR
    preset: str | None = None
    max_sets: int = Field(5, ge=1, le=5)
    points_per_set: int = Field(25, ge=1, le=99)
    has_tie_break: bool = True
    tie_break_points: int = Field(15, ge=1, le=99)
    deuce_type: DeuceType = DeuceType.STANDARD
    auto_swap_sides: bool = True
    team_a_name: str = Field("Home", min_length=1, max_length=30)
    team_b_name: str = Field("Guest", min_length=1, max_length=30)


class ActionRequest(BaseModel):
    type: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class AddPlayerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=30)
    target: str = "A"
    number: str | None = None
    skill_level: int | None = Field(None, ge=1, le=10)
    profile_id: str | None = None


class GenerateTeamsRequest(BaseModel):
    lines: list[str] = Field(..., min_length=1)


class ProfileRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=30)
    skill_level: int = Field(5, ge=1, le=10)
    number: str | None = None
    role: PlayerRole = PlayerRole.NONE


# ---------- Helpers ----------
def _load_session(conn: Any, match_id: str) -> MatchSession:
    state = match_repo.get(conn, match_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return MatchSession(state=state, profiles=profile_repo.load_store(conn))


def _save_session(conn: Any, match_id: str, session: MatchSession) -> None:
    match_repo.save(conn, session.state, match_id)
    for profile in session.profiles.all():
        profile_repo.upsert(conn, profile)


def _response(match_id: str, session: MatchSession, result: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"match_id": match_id, "state": state_to_dict(session.state)}
    if result is not None:
        body["result"] = result.to_dict()
    return body


# ---------- Endpoints ----------
@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/presets")
def list_presets() -> list[dict[str, Any]]:
    return [
        {
            "name": p.name,
            "label": p.label,
            "mode": p.mode.value,
            "players_on_court": p.players_on_court,
            "bench_limit": p.bench_limit,
        }
        for p in PRESETS.values()
    ]


@app.get("/actions")
def list_actions() -> list[str]:
    return sorted(ACTION_TYPES)


@app.post("/matches", status_code=201)
def create_match(req: CreateMatchRequest) -> dict[str, Any]:
    preset = req.preset or preset_for(req.mode).name
    if preset not in PRESETS:
        raise HTTPException(status_code=400, detail=f"Unknown preset {preset}")
    config = GameConfig(
        mode=req.mode,
        preset=preset,
        max_sets=req.max_sets,
        points_per_set=req.points_per_set,
        has_tie_break=req.has_tie_break,
        tie_break_points=req.tie_break_points,
        deuce_type=req.deuce_type,
        auto_swap_sides=req.auto_swap_sides,
    )
    state = initial_state(config, team_a_name=req.team_a_name, team_b_name=req.team_b_name)
    with db_conn() as conn:
        match_id = match_repo.save(conn, state)
    logger.info("created match %s (%s)", match_id, preset)
    return {"match_id": match_id, "state": state_to_dict(state)}


@app.get("/matches")
def list_matches(limit: int = Query(20, ge=1, le=100)) -> list[dict[str, Any]]:
    with db_conn() as conn:
        return match_repo.list_recent(conn, limit)


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        session = _load_session(conn, match_id)
    return _response(match_id, session)


@app.delete("/matches/{match_id}", status_code=204)
def delete_match(match_id: str) -> None:
    with db_conn() as conn:
        if not match_repo.delete(conn, match_id):
            raise HTTPException(status_code=404, detail="Match not found")


@app.post("/matches/{match_id}/actions")
def dispatch_action(match_id: str, req: ActionRequest) -> dict[str, Any]:
    """Apply one action. Game rejections come back as result.ok = false, not as HTTP errors."""
    try:
        action = action_from_payload(req.type, req.payload)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=f"Bad action: {e}") from e
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    with db_conn() as conn:
        session = _load_session(conn, match_id)
        result = session.dispatch(action)
        if result.ok:
            _save_session(conn, match_id, session)
    return _response(match_id, session, result)


@app.post("/matches/{match_id}/players")
def add_player(match_id: str, req: AddPlayerRequest) -> dict[str, Any]:
    with db_conn() as conn:
        session = _load_session(conn, match_id)
        result = session.add_player(req.name, req.target, req.number, req.skill_level, req.profile_id)
        if result.ok:
            _save_session(conn, match_id, session)
    return _response(match_id, session, result)


@app.post("/matches/{match_id}/generate")
def generate_teams(match_id: str, req: GenerateTeamsRequest) -> dict[str, Any]:
    with db_conn() as conn:
        session = _load_session(conn, match_id)
        result = session.generate_teams(req.lines)
        _save_session(conn, match_id, session)
    return _response(match_id, session, result)


@app.post("/matches/{match_id}/players/{player_id}/profile")
def save_player_profile(match_id: str, player_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        session = _load_session(conn, match_id)
        profile = session.save_player_to_profile(player_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Player not found")
        _save_session(conn, match_id, session)
    return {"profile": profile.to_dict(), **_response(match_id, session)}


@app.get("/profiles")
def list_profiles() -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [p.to_dict() for p in profile_repo.list_all(conn)]


@app.post("/profiles", status_code=201)
def create_profile(req: ProfileRequest) -> dict[str, Any]:
    profile = new_profile(req.name, req.skill_level, req.number, req.role)
    with db_conn() as conn:
        profile_repo.upsert(conn, profile)
    return profile.to_dict()


@app.get("/profiles/{profile_id}")
def get_profile(profile_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        profile = profile_repo.get(conn, profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile.to_dict()


@app.delete("/profiles/{profile_id}", status_code=204)
def delete_profile(profile_id: str) -> None:
    with db_conn() as conn:
        if not profile_repo.delete(conn, profile_id):
            raise HTTPException(status_code=404, detail="Profile not found")


# ---------- Run with: uvicorn courtside.api:app --reload ----------
