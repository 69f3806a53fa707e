"""
Match lifecycle: reset, settings changes, and advancing to the next game.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from courtside.config import GameConfig
from courtside.models import ActionResult, Reason, Team

from .balancing import distribute_standard
from .lineup import Lineup, new_id
from .rotation import handle_rotate
from .state import GameState
from .undo import RosterSnapshot, RotationEntry

logger = logging.getLogger(__name__)


def _zero_offsets(lineup: Lineup) -> Lineup:
    def _zero(team: Team) -> Team:
        return team if team.tactical_offset == 0 else replace(team, tactical_offset=0)
    return Lineup(_zero(lineup.court_a), _zero(lineup.court_b), tuple(_zero(t) for t in lineup.queue))


def _fresh_scoreboard(state: GameState) -> GameState:
    """Clear everything match-scoped; rosters, queue and config stay."""
    return replace(
        state,
        score_a=0,
        score_b=0,
        sets_a=0,
        sets_b=0,
        current_set=1,
        history=(),
        action_log=(),
        match_log=(),
        last_snapshot=None,
        last_scorer_team=None,
        is_match_over=False,
        match_winner=None,
        serving_team=None,
        swapped_sides=False,
        pending_side_switch=False,
        timeouts_a=0,
        timeouts_b=0,
        in_sudden_death=False,
        match_duration_seconds=0,
    )


def reset_match(state: GameState, now: float, game_id: str | None = None) -> tuple[GameState, ActionResult]:
    new = _fresh_scoreboard(state).with_lineup(_zero_offsets(state.lineup))
    new = replace(new, game_id=game_id or new_id(), created_at=now, rotation_report=None)
    logger.info("match reset (%s)", new.game_id)
    return new, ActionResult.success()


def apply_settings(state: GameState, config: GameConfig, should_reset: bool = False) -> tuple[GameState, ActionResult]:
    """
    Swap in new rules. A different mode or preset changes court capacity, so
    every player, benches included, is redistributed in standard order.
    """
    layout_changed = config.mode != state.config.mode or config.preset != state.config.preset
    new = replace(state, config=config)
    if should_reset:
        new = _fresh_scoreboard(new).with_lineup(_zero_offsets(new.lineup))

    if layout_changed:
        lineup = new.lineup
        everyone = list(lineup.all_players())
        empty = Lineup(
            replace(lineup.court_a, players=(), reserves=(), has_active_bench=False, tactical_offset=0),
            replace(lineup.court_b, players=(), reserves=(), has_active_bench=False, tactical_offset=0),
            (),
        )
        result = distribute_standard(everyone, empty, config.court_limit)
        new = replace(new.with_lineup(result.lineup), rotation_report=None)
        logger.info("preset %s -> %s: redistributed %d players", state.config.preset, config.preset, len(everyone))
    return new, ActionResult.success(redistributed=layout_changed)


def advance_to_next_game(state: GameState, now: float, game_id: str | None = None) -> tuple[GameState, ActionResult]:
    """
    Rotate teams after a decided match and start a new one. The rotation is
    logged with the pre-rotation rosters so the new match can undo it.
    """
    if state.match_winner is None:
        return state, ActionResult.failure(Reason.MATCH_NOT_DECIDED)

    winner = state.match_winner
    new = _fresh_scoreboard(state)
    new = replace(new, game_id=game_id or new_id(), created_at=now, rotation_report=None)
    if not state.queue:
        return new.with_lineup(_zero_offsets(state.lineup)), ActionResult.success(rotated=False)

    snapshot = RosterSnapshot(state.team_a, state.team_b, state.queue, state.rotation_report)
    lineup, report = handle_rotate(state.lineup, winner, state.rotation_mode, state.court_limit)
    entry = RotationEntry(snapshot, now)
    new = replace(
        new.with_lineup(_zero_offsets(lineup)),
        rotation_report=report,
        action_log=(entry,),
        match_log=(entry,),
    )
    if report is not None:
        logger.info("rotation: %s out, %s in", report.outgoing_team.name, report.incoming_team.name)
    return new, ActionResult.success(rotated=report is not None)
