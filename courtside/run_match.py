"""
Run a simulated king-of-the-court session: generated players, random rallies
weighted by team skill, and winner-stays rotation between games.
The live score and each rotation report are printed in the terminal.
"""
from __future__ import annotations

import argparse
import logging
import random
import time
from pathlib import Path

from courtside.config import PRESETS, GameConfig, RotationMode
from courtside.engine import actions as a
from courtside.engine.state import GameState
from courtside.models import RotationReport, TeamSide
from courtside.persistence import MatchRepository, get_connection, init_db
from courtside.services import MatchSession

FIRST_NAMES = (
    "Ana", "Bruno", "Carla", "Davi", "Elisa", "Felipe", "Gabi", "Hugo", "Iris", "Joao",
    "Karla", "Lucas", "Maya", "Nico", "Olga", "Paulo", "Rita", "Sara", "Tiago", "Vera",
)


def _roster_lines(count: int, rng: random.Random) -> list[str]:
    lines = []
    for i in range(count):
        name = f"{FIRST_NAMES[i % len(FIRST_NAMES)]} {chr(ord('A') + i // len(FIRST_NAMES))}"
        lines.append(f"{i + 1} {name} {rng.randint(2, 10)}")
    return lines


def _rally_winner(state: GameState, rng: random.Random) -> TeamSide:
    skill_a = state.team_a.average_skill() or 1.0
    skill_b = state.team_b.average_skill() or 1.0
    return TeamSide.A if rng.random() < skill_a / (skill_a + skill_b) else TeamSide.B


def _print_lineup(state: GameState) -> None:
    print(f"  A: {state.team_a.name:<14} {', '.join(p.name for p in state.team_a.players)}")
    print(f"  B: {state.team_b.name:<14} {', '.join(p.name for p in state.team_b.players)}")
    for team in state.queue:
        print(f"     queue {team.name:<10} {', '.join(p.name for p in team.players)}")


def _print_report(report: RotationReport) -> None:
    print(f"  Rotation: {report.outgoing_team.name} out, {report.incoming_team.name} in")
    for line in report.logs:
        print(f"    - {line}")


def run(
    seed: int | None = None,
    preset: str = "beach-4v4",
    players: int = 14,
    games: int = 3,
    balanced: bool = False,
    delay: float = 0.0,
    db_path: Path | None = None,
) -> MatchSession:
    if seed is None:
        seed = random.randint(1, 2**31 - 1)
    rng = random.Random(seed)
    court = PRESETS[preset]
    config = GameConfig(mode=court.mode, preset=preset, max_sets=1, points_per_set=15, has_tie_break=False)
    session = MatchSession(config=config)
    session.dispatch(a.SetRotationMode(RotationMode.BALANCED if balanced else RotationMode.STANDARD))
    session.generate_teams(_roster_lines(players, rng))

    print(f"\n  {court.label}, {players} players, {games} game(s)  [seed={seed}]")
    print("  " + "-" * 56)
    _print_lineup(session.state)

    for game in range(1, games + 1):
        state = session.state
        print(f"\n  Game {game}: {state.team_a.name} vs {state.team_b.name}")
        while not session.state.is_match_over:
            session.dispatch(a.ScorePoint(_rally_winner(session.state, rng)))
            s = session.state
            if delay:
                print(f"    {s.score_a:>2} - {s.score_b:<2}")
                time.sleep(delay)
        s = session.state
        last = s.history[-1]
        winner = s.team(s.match_winner)
        print(f"  {winner.name} wins {last.score_a}-{last.score_b}")
        if game < games:
            session.dispatch(a.AdvanceToNextGame())
            if session.state.rotation_report is not None:
                _print_report(session.state.rotation_report)
            _print_lineup(session.state)

    if db_path is not None:
        init_db(db_path)
        conn = get_connection(db_path)
        try:
            saved = MatchRepository().save(conn, session.state)
        finally:
            conn.close()
        print(f"\n  Saved session {saved} to {db_path}")
    print()
    return session


def main():
    parser = argparse.ArgumentParser(description="Simulate a winner-stays volleyball session.")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="beach-4v4", help="Court layout")
    parser.add_argument("--players", type=int, default=14, help="Number of generated players")
    parser.add_argument("--games", type=int, default=3, help="Games to play")
    parser.add_argument("--balanced", action="store_true", help="Fill short rosters by skill")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds between points (0 = no live score)")
    parser.add_argument("--db", type=Path, default=None, help="Save the final state to this sqlite file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    run(
        seed=args.seed,
        preset=args.preset,
        players=args.players,
        games=args.games,
        balanced=args.balanced,
        delay=args.delay,
        db_path=args.db,
    )


if __name__ == "__main__":
    main()
