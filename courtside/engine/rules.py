"""
Scoring rules: set and match winners, serve rotation, side switches.
Plain functions with no state of their own.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Sequence, TypeVar

from courtside.config import (
    MIN_LEAD_TO_WIN,
    SIDE_SWITCH_INTERVAL,
    SUDDEN_DEATH_POINTS,
    TIE_BREAK_SIDE_SWITCH_INTERVAL,
    DeuceType,
    GameConfig,
    GameMode,
)
from courtside.models import Direction, Team, TeamSide

T = TypeVar("T")


def calculate_winner(
    score_a: int,
    score_b: int,
    target: int,
    in_sudden_death: bool = False,
    min_lead: int = MIN_LEAD_TO_WIN,
) -> TeamSide | None:
    """
    Set winner or None. Normal play: at least target points and a lead of
    min_lead. Sudden death: first to SUDDEN_DEATH_POINTS with any lead.
    """
    if in_sudden_death:
        if score_a >= SUDDEN_DEATH_POINTS and score_a > score_b:
            return TeamSide.A
        if score_b >= SUDDEN_DEATH_POINTS and score_b > score_a:
            return TeamSide.B
        return None
    if score_a >= target and score_a - score_b >= min_lead:
        return TeamSide.A
    if score_b >= target and score_b - score_a >= min_lead:
        return TeamSide.B
    return None


def sets_to_win_match(max_sets: int) -> int:
    return math.ceil(max_sets / 2)


def enters_sudden_death(config: GameConfig, score_a: int, score_b: int, target: int, in_sudden_death: bool) -> bool:
    """Both sides one short of the target under the 3-point sudden death policy."""
    return (
        config.deuce_type == DeuceType.SUDDEN_DEATH_3PT
        and not in_sudden_death
        and score_a == target - 1
        and score_b == target - 1
    )


def side_switch_due(config: GameConfig, set_number: int, total_points: int) -> bool:
    """Beach play swaps ends every 7 points, every 5 in the tie-break set."""
    if config.mode != GameMode.BEACH or not config.auto_swap_sides or total_points <= 0:
        return False
    interval = TIE_BREAK_SIDE_SWITCH_INTERVAL if config.is_tie_break_set(set_number) else SIDE_SWITCH_INTERVAL
    return total_points % interval == 0


# ---------- Serve rotation ----------
def rotate_clockwise(players: Sequence[T]) -> tuple[T, ...]:
    """Last player moves to the front. Fewer than two players: unchanged."""
    if len(players) < 2:
        return tuple(players)
    return (players[-1],) + tuple(players[:-1])


def rotate_counter_clockwise(players: Sequence[T]) -> tuple[T, ...]:
    if len(players) < 2:
        return tuple(players)
    return tuple(players[1:]) + (players[0],)


def shift_offset(team: Team, direction: Direction) -> Team:
    """Display-only rotation: move tactical_offset one step, modulo the on-court count."""
    n = len(team.players)
    if n < 2:
        return team
    delta = 1 if Direction(direction) == Direction.CLOCKWISE else -1
    return replace(team, tactical_offset=(team.tactical_offset + delta) % n)


def displayed_players(team: Team) -> tuple:
    """On-court order as shown, i.e. players rotated clockwise tactical_offset times."""
    n = len(team.players)
    if n < 2:
        return team.players
    k = team.tactical_offset % n
    if k == 0:
        return team.players
    return team.players[-k:] + team.players[:-k]
