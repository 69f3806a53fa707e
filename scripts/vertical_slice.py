#!/usr/bin/env python3
"""
Vertical slice: Save profiles -> Build rosters -> Play a match -> Persist -> Reload -> Undo.
Run from project root: python3 scripts/vertical_slice.py
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from courtside.config import GameConfig, GameMode
from courtside.engine import actions as a
from courtside.models import PlayerRole, TeamSide
from courtside.persistence import MatchRepository, ProfileRepository, get_connection, init_db
from courtside.persistence.db import set_db_path
from courtside.profiles import new_profile
from courtside.services import MatchSession

ROSTER = [
    "1 Ana 8",
    "2 Bruno 6",
    "3 Carla 7",
    "4 Davi 5",
    "5 Elisa 9",
    "6 Felipe 4",
    "Gabi",
]


def main() -> None:
    # Use data/vertical_slice.db for demo (distinct from courtside.db)
    db_path = PROJECT_ROOT / "data" / "vertical_slice.db"
    set_db_path(db_path)
    init_db(db_path=db_path)

    conn = get_connection()
    try:
        profile_repo = ProfileRepository()
        match_repo = MatchRepository()

        # 1. Ensure a saved profile exists
        store = profile_repo.load_store(conn)
        if store.find_by_name("Gabi") is None:
            profile = profile_repo.upsert(conn, new_profile("Gabi", 7, "11", PlayerRole.SETTER))
            store.upsert(profile)
            print(f"Created profile: {profile.name} (id={profile.id})")

        # 2. Build rosters from pasted lines; Gabi picks up the profile
        config = GameConfig(mode=GameMode.BEACH, preset="triples-3v3", max_sets=1, points_per_set=15, has_tie_break=False)
        session = MatchSession(profiles=store, config=config)
        session.generate_teams(ROSTER)
        state = session.state
        print(f"Court A: {[p.name for p in state.team_a.players]}")
        print(f"Court B: {[p.name for p in state.team_b.players]}")
        print(f"Queue:   {[[p.name for p in t.players] for t in state.queue]}")

        # 3. Play a match: A serves first and wins 15-11
        session.dispatch(a.SetServer(TeamSide.A))
        rallies = [TeamSide.A, TeamSide.B] * 11 + [TeamSide.A] * 4
        for side in rallies:
            session.dispatch(a.ScorePoint(side))
        state = session.state
        last = state.history[-1]
        print(f"Set 1: {last.score_a}-{last.score_b} (winner: {state.team(last.winner).name})")
        if state.rotation_report is not None:
            print(f"  Next up: {state.rotation_report.incoming_team.name}")

        # 4. Persist and retrieve
        match_id = match_repo.save(conn, state)
        retrieved = match_repo.get(conn, match_id)
        assert retrieved == state
        print(f"Persisted and retrieved match: {match_id}")

        # 5. Undo survives the reload: back to the pre-point state of the last set
        reloaded = MatchSession(state=retrieved, profiles=store)
        result = reloaded.dispatch(a.Undo())
        print(f"Undo ({result.details.get('undone')}): score {reloaded.state.score_a}-{reloaded.state.score_b}")

        print("\nVertical slice complete.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
