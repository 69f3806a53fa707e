"""
SQLite schema for saved matches and player profiles.
Each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def matches_schema() -> str:
    """One row per match session; the whole GameState as JSON."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        state_json TEXT NOT NULL,
        is_match_over INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_matches_updated ON matches(updated_at);
    """


def profiles_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        skill_level INTEGER NOT NULL DEFAULT 5,
        number TEXT,
        role TEXT NOT NULL DEFAULT 'none',
        updated_at REAL NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_profiles_name ON profiles(name COLLATE NOCASE);
    """


def all_schema_sql() -> str:
    return matches_schema() + profiles_schema()
