"""
Repository layer: read/write saved matches and profiles.
Each method takes a connection; callers own connection lifetime.
"""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any

from courtside.engine.state import GameState
from courtside.models import PlayerRole
from courtside.profiles import PlayerProfile, ProfileStore

from .snapshots import dumps, loads


# ---------- MatchRepository ----------


class MatchRepository:
    """Saved match sessions, stored as whole-state JSON snapshots."""

    def save(self, conn: sqlite3.Connection, state: GameState, session_id: str | None = None) -> str:
        """Insert or replace. session_id defaults to the state's game_id."""
        sid = session_id or state.game_id
        now = datetime.now(timezone.utc).isoformat()
        conn.execute(
            """INSERT INTO matches (id, state_json, is_match_over, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   state_json = excluded.state_json,
                   is_match_over = excluded.is_match_over,
                   updated_at = excluded.updated_at""",
            (sid, dumps(state), int(state.is_match_over), now, now),
        )
        conn.commit()
        return sid

    def get(self, conn: sqlite3.Connection, session_id: str) -> GameState | None:
        row = conn.execute("SELECT state_json FROM matches WHERE id = ?", (session_id,)).fetchone()
        if row is None:
            return None
        return loads(row["state_json"])

    def list_recent(self, conn: sqlite3.Connection, limit: int = 20) -> list[dict[str, Any]]:
        rows = conn.execute(
            "SELECT id, is_match_over, created_at, updated_at FROM matches ORDER BY updated_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            {
                "id": r["id"],
                "is_match_over": bool(r["is_match_over"]),
                "created_at": r["created_at"],
                "updated_at": r["updated_at"],
            }
            for r in rows
        ]

    def delete(self, conn: sqlite3.Connection, session_id: str) -> bool:
        cur = conn.execute("DELETE FROM matches WHERE id = ?", (session_id,))
        conn.commit()
        return cur.rowcount > 0


# ---------- ProfileRepository ----------


def _row_to_profile(row: sqlite3.Row) -> PlayerProfile:
    return PlayerProfile(
        id=row["id"],
        name=row["name"],
        skill_level=row["skill_level"],
        number=row["number"],
        role=PlayerRole(row["role"] or PlayerRole.NONE.value),
        updated_at=row["updated_at"],
    )


class ProfileRepository:
    """CRUD for player profiles."""

    def upsert(self, conn: sqlite3.Connection, profile: PlayerProfile) -> PlayerProfile:
        conn.execute(
            """INSERT INTO profiles (id, name, skill_level, number, role, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   name = excluded.name,
                   skill_level = excluded.skill_level,
                   number = excluded.number,
                   role = excluded.role,
                   updated_at = excluded.updated_at""",
            (profile.id, profile.name, profile.skill_level, profile.number, profile.role.value, profile.updated_at),
        )
        conn.commit()
        return profile

    def get(self, conn: sqlite3.Connection, profile_id: str) -> PlayerProfile | None:
        row = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,)).fetchone()
        return _row_to_profile(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[PlayerProfile]:
        rows = conn.execute("SELECT * FROM profiles ORDER BY name COLLATE NOCASE").fetchall()
        return [_row_to_profile(r) for r in rows]

    def delete(self, conn: sqlite3.Connection, profile_id: str) -> bool:
        cur = conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        conn.commit()
        return cur.rowcount > 0

    def load_store(self, conn: sqlite3.Connection) -> ProfileStore:
        return ProfileStore(self.list_all(conn))
