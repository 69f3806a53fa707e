"""
Score Engine: point, subtract, timeout, server and side transitions.

A point runs the whole chain: side switch check, sudden death entry, win
check, side-out rotation, and at a set end the set/match bookkeeping plus a
pre-computed rotation report.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from courtside.config import MAX_SCORE
from courtside.models import ActionResult, Direction, Reason, SetHistory, SkillType, TeamSide

from .rotation import handle_rotate
from .rules import (
    calculate_winner,
    enters_sudden_death,
    rotate_clockwise,
    sets_to_win_match,
    shift_offset,
    side_switch_due,
)
from .state import GameState
from .undo import ManualRotationEntry, PointEntry, TimeoutEntry

logger = logging.getLogger(__name__)

Transition = tuple[GameState, ActionResult]


def score_point(
    state: GameState,
    team: TeamSide,
    now: float,
    player_id: str | None = None,
    skill: SkillType | None = None,
) -> Transition:
    if state.is_match_over:
        return state, ActionResult.failure(Reason.MATCH_OVER)
    if state.score(team) >= MAX_SCORE:
        logger.warning("point for %s blocked at score ceiling %d", team.value, MAX_SCORE)
        return state, ActionResult.failure(Reason.SCORE_LIMIT)

    score_a = state.score_a + (1 if team == TeamSide.A else 0)
    score_b = state.score_b + (1 if team == TeamSide.B else 0)

    switch = side_switch_due(state.config, state.current_set, score_a + score_b)
    swapped_sides = not state.swapped_sides if switch else state.swapped_sides

    target = state.target_points
    in_sudden_death = state.in_sudden_death
    if enters_sudden_death(state.config, score_a, score_b, target, in_sudden_death):
        in_sudden_death = True
        score_a = score_b = 0
        logger.debug("set %d enters sudden death", state.current_set)

    winner = calculate_winner(score_a, score_b, target, in_sudden_death, state.config.min_lead)
    side_out = winner is None and state.serving_team is not None and state.serving_team != team
    scoring_team = state.team(team)

    entry = PointEntry(
        team=team,
        prev_score_a=state.score_a,
        prev_score_b=state.score_b,
        prev_serving_team=state.serving_team,
        prev_in_sudden_death=state.in_sudden_death,
        prev_swapped_sides=state.swapped_sides,
        auto_rotated=side_out,
        prev_tactical_offset=scoring_team.tactical_offset,
        player_id=player_id,
        skill=skill,
        timestamp=now,
    )

    if winner is not None:
        return _finish_set(state, winner, score_a, score_b, entry), ActionResult.success(set_winner=winner.value)

    new = state
    if side_out:
        rotated = replace(scoring_team, players=rotate_clockwise(scoring_team.players), tactical_offset=0)
        new = new.with_team(team, rotated)
    new = replace(
        new,
        score_a=score_a,
        score_b=score_b,
        serving_team=team,
        in_sudden_death=in_sudden_death,
        swapped_sides=swapped_sides,
        pending_side_switch=switch,
        last_scorer_team=team,
        action_log=state.action_log + (entry,),
        match_log=state.match_log + (entry,),
    )
    return new, ActionResult.success(side_out=side_out, side_switch=switch)


def _finish_set(state: GameState, winner: TeamSide, score_a: int, score_b: int, entry: PointEntry) -> GameState:
    sets_a = state.sets_a + (1 if winner == TeamSide.A else 0)
    sets_b = state.sets_b + (1 if winner == TeamSide.B else 0)
    needed = sets_to_win_match(state.config.max_sets)
    match_winner = winner if max(sets_a, sets_b) >= needed else None
    history = state.history + (SetHistory(state.current_set, score_a, score_b, winner),)

    _, report = handle_rotate(state.lineup, winner, state.rotation_mode, state.court_limit)
    logger.info(
        "set %d to %s (%d-%d)%s",
        state.current_set,
        winner.value,
        score_a,
        score_b,
        f", match to {match_winner.value}" if match_winner else "",
    )
    return replace(
        state,
        score_a=score_a if match_winner else 0,
        score_b=score_b if match_winner else 0,
        sets_a=sets_a,
        sets_b=sets_b,
        current_set=state.current_set if match_winner else state.current_set + 1,
        history=history,
        is_match_over=match_winner is not None,
        match_winner=match_winner,
        serving_team=None,
        timeouts_a=0,
        timeouts_b=0,
        in_sudden_death=False,
        pending_side_switch=False,
        last_scorer_team=winner,
        action_log=(),
        match_log=state.match_log + (entry,),
        last_snapshot=state,
        rotation_report=report,
    )


def subtract_point(state: GameState, team: TeamSide) -> Transition:
    """Plain score correction. Not logged, so it is not undoable."""
    if state.is_match_over:
        return state, ActionResult.failure(Reason.MATCH_OVER)
    if state.score(team) <= 0:
        return state, ActionResult.failure(Reason.SCORE_AT_ZERO)
    if team == TeamSide.A:
        new = replace(state, score_a=state.score_a - 1)
    else:
        new = replace(state, score_b=state.score_b - 1)
    return replace(new, pending_side_switch=False), ActionResult.success()


def request_timeout(state: GameState, team: TeamSide, now: float) -> Transition:
    if state.timeouts(team) >= state.config.max_timeouts:
        return state, ActionResult.failure(Reason.TIMEOUT_LIMIT)
    entry = TimeoutEntry(team, state.timeouts_a, state.timeouts_b, now)
    if team == TeamSide.A:
        new = replace(state, timeouts_a=state.timeouts_a + 1)
    else:
        new = replace(state, timeouts_b=state.timeouts_b + 1)
    new = replace(new, action_log=state.action_log + (entry,), match_log=state.match_log + (entry,))
    return new, ActionResult.success(remaining=state.config.max_timeouts - new.timeouts(team))


def set_server(state: GameState, team: TeamSide | None) -> Transition:
    return replace(state, serving_team=team), ActionResult.success()


def toggle_sides(state: GameState) -> Transition:
    return replace(state, swapped_sides=not state.swapped_sides, pending_side_switch=False), ActionResult.success()


def manual_rotation(state: GameState, team: TeamSide, direction: Direction, now: float) -> Transition:
    """Display-only rotation of one court team. Undoable; never touches serve order."""
    current = state.team(team)
    if len(current.players) < 2:
        return state, ActionResult.success(rotated=False)
    entry = ManualRotationEntry(team, Direction(direction), now)
    new = state.with_team(team, shift_offset(current, direction))
    new = replace(new, action_log=state.action_log + (entry,), match_log=state.match_log + (entry,))
    return new, ActionResult.success(rotated=True)


def set_match_duration(state: GameState, seconds: int) -> Transition:
    return replace(state, match_duration_seconds=max(0, int(seconds))), ActionResult.success()
