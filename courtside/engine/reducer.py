"""
reduce(state, action) -> (new_state, ActionResult)

Single entry point for every state change. Handlers are registered per
action class; anything unregistered is a programming error (TypeError).
Rejected actions return the state they were given, unchanged.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable

from courtside.config import RotationMode
from courtside.models import ActionResult, Location, Reason, TeamSide

from . import actions as a
from . import match, roster, scoring
from .balancing import balance_snake, distribute_standard
from .lineup import Lineup
from .state import GameState
from .undo import undo

logger = logging.getLogger(__name__)

Result = tuple[GameState, ActionResult]
Handler = Callable[..., Result]

_HANDLERS: dict[type, Handler] = {}


def _handles(action_cls: type) -> Callable[[Callable[..., Result]], Callable[..., Result]]:
    def register(fn: Callable[..., Result]) -> Callable[..., Result]:
        _HANDLERS[action_cls] = fn
        return fn
    return register


def registered_actions() -> frozenset[type]:
    return frozenset(_HANDLERS)


def reduce(state: GameState, action: object, now: float | None = None) -> Result:
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Not an action: {type(action).__name__}")
    new, result = handler(state, action, time.time() if now is None else now)
    if not result.ok:
        logger.warning("%s rejected: %s", type(action).__name__, result.reason.value if result.reason else "?")
        return state, result
    return new, result


def _roster(state: GameState, change: tuple[Lineup, ActionResult]) -> Result:
    lineup, result = change
    if not result.ok:
        return state, result
    return state.with_lineup(lineup), result


# ---------- Scoring ----------
@_handles(a.ScorePoint)
def _score_point(state: GameState, action: a.ScorePoint, now: float) -> Result:
    return scoring.score_point(state, TeamSide(action.team), now, action.player_id, action.skill)


@_handles(a.SubtractPoint)
def _subtract_point(state: GameState, action: a.SubtractPoint, now: float) -> Result:
    return scoring.subtract_point(state, TeamSide(action.team))


@_handles(a.RequestTimeout)
def _timeout(state: GameState, action: a.RequestTimeout, now: float) -> Result:
    return scoring.request_timeout(state, TeamSide(action.team), now)


@_handles(a.SetServer)
def _set_server(state: GameState, action: a.SetServer, now: float) -> Result:
    return scoring.set_server(state, TeamSide(action.team) if action.team else None)


@_handles(a.ToggleSides)
def _toggle_sides(state: GameState, action: a.ToggleSides, now: float) -> Result:
    return scoring.toggle_sides(state)


@_handles(a.ManualRotation)
def _manual_rotation(state: GameState, action: a.ManualRotation, now: float) -> Result:
    return scoring.manual_rotation(state, TeamSide(action.team), action.direction, now)


@_handles(a.Undo)
def _undo(state: GameState, action: a.Undo, now: float) -> Result:
    return undo(state)


@_handles(a.SetMatchDuration)
def _duration(state: GameState, action: a.SetMatchDuration, now: float) -> Result:
    return scoring.set_match_duration(state, action.seconds)


# ---------- Match lifecycle ----------
@_handles(a.ResetMatch)
def _reset_match(state: GameState, action: a.ResetMatch, now: float) -> Result:
    return match.reset_match(state, now, action.game_id)


@_handles(a.ApplySettings)
def _apply_settings(state: GameState, action: a.ApplySettings, now: float) -> Result:
    return match.apply_settings(state, action.config, action.should_reset)


@_handles(a.AdvanceToNextGame)
def _advance(state: GameState, action: a.AdvanceToNextGame, now: float) -> Result:
    return match.advance_to_next_game(state, now, action.game_id)


@_handles(a.SetRotationMode)
def _rotation_mode(state: GameState, action: a.SetRotationMode, now: float) -> Result:
    return replace(state, rotation_mode=RotationMode(action.mode)), ActionResult.success()


@_handles(a.LoadState)
def _load_state(state: GameState, action: a.LoadState, now: float) -> Result:
    if not isinstance(action.state, GameState):
        raise TypeError("LoadState needs a GameState")
    return action.state, ActionResult.success()


# ---------- Roster ----------
@_handles(a.AddPlayer)
def _add_player(state: GameState, action: a.AddPlayer, now: float) -> Result:
    lineup = state.lineup
    player = replace(action.player, original_index=roster.next_original_index(lineup))
    target = Location.parse(action.target)
    return _roster(state, roster.add_player(lineup, player, target, state.court_limit, state.bench_limit))


@_handles(a.RemovePlayer)
def _remove_player(state: GameState, action: a.RemovePlayer, now: float) -> Result:
    return _roster(state, roster.remove_player(state.lineup, action.player_id, state.court_limit, state.bench_limit))


@_handles(a.DeletePlayer)
def _delete_player(state: GameState, action: a.DeletePlayer, now: float) -> Result:
    lineup, record, result = roster.delete_player(state.lineup, action.player_id, now)
    if record is None:
        return state, result
    new = replace(state.with_lineup(lineup), deleted_player_history=state.deleted_player_history + (record,))
    return new, result


@_handles(a.UndoDeletePlayer)
def _undo_delete(state: GameState, action: a.UndoDeletePlayer, now: float) -> Result:
    if not state.deleted_player_history:
        return state, ActionResult.failure(Reason.NOTHING_TO_UNDO)
    record = state.deleted_player_history[-1]
    lineup, result = roster.restore_deleted(state.lineup, record, state.court_limit, state.bench_limit)
    new = replace(state.with_lineup(lineup), deleted_player_history=state.deleted_player_history[:-1])
    return new, result


@_handles(a.CommitDeletions)
def _commit_deletions(state: GameState, action: a.CommitDeletions, now: float) -> Result:
    return replace(state, deleted_player_history=()), ActionResult.success()


@_handles(a.MovePlayer)
def _move_player(state: GameState, action: a.MovePlayer, now: float) -> Result:
    return _roster(
        state,
        roster.move_player(
            state.lineup,
            action.player_id,
            Location.parse(action.source),
            Location.parse(action.dest),
            state.court_limit,
            state.bench_limit,
            action.index,
        ),
    )


@_handles(a.SubstitutePlayer)
def _substitute(state: GameState, action: a.SubstitutePlayer, now: float) -> Result:
    return _roster(state, roster.substitute(state.lineup, action.team, action.out_id, action.in_id))


@_handles(a.SwapPositions)
def _swap_positions(state: GameState, action: a.SwapPositions, now: float) -> Result:
    return _roster(state, roster.swap_positions(state.lineup, action.team, action.index_a, action.index_b))


@_handles(a.UpdatePlayer)
def _update_player(state: GameState, action: a.UpdatePlayer, now: float) -> Result:
    return _roster(state, roster.update_player(state.lineup, action.player_id, dict(action.changes)))


@_handles(a.ToggleFixed)
def _toggle_fixed(state: GameState, action: a.ToggleFixed, now: float) -> Result:
    return _roster(state, roster.toggle_fixed(state.lineup, action.player_id))


@_handles(a.ToggleBench)
def _toggle_bench(state: GameState, action: a.ToggleBench, now: float) -> Result:
    return _roster(state, roster.toggle_bench(state.lineup, action.team))


@_handles(a.RenameTeam)
def _rename_team(state: GameState, action: a.RenameTeam, now: float) -> Result:
    return _roster(state, roster.rename_team(state.lineup, action.team, action.name))


@_handles(a.SetTeamColor)
def _team_color(state: GameState, action: a.SetTeamColor, now: float) -> Result:
    return _roster(state, roster.set_team_color(state.lineup, action.team, action.color))


@_handles(a.SetTeamLogo)
def _team_logo(state: GameState, action: a.SetTeamLogo, now: float) -> Result:
    return _roster(state, roster.set_team_logo(state.lineup, action.team, action.logo))


@_handles(a.SortTeam)
def _sort_team(state: GameState, action: a.SortTeam, now: float) -> Result:
    return _roster(state, roster.sort_team(state.lineup, action.team, action.criteria))


@_handles(a.ReorderQueue)
def _reorder_queue(state: GameState, action: a.ReorderQueue, now: float) -> Result:
    return _roster(state, roster.reorder_queue(state.lineup, action.from_index, action.to_index))


@_handles(a.DisbandTeam)
def _disband(state: GameState, action: a.DisbandTeam, now: float) -> Result:
    lineup, removed, result = roster.disband_team(state.lineup, action.team_id)
    if removed is None:
        return state, result
    team, index = removed
    return state.with_lineup(lineup), ActionResult.success(team=team.to_dict(), index=index)


@_handles(a.RestoreTeam)
def _restore_team(state: GameState, action: a.RestoreTeam, now: float) -> Result:
    return _roster(
        state, roster.restore_team(state.lineup, action.team, action.index, state.court_limit, state.bench_limit)
    )


@_handles(a.ResetRosters)
def _reset_rosters(state: GameState, action: a.ResetRosters, now: float) -> Result:
    new = replace(state.with_lineup(roster.reset_rosters(state.lineup)), rotation_report=None)
    return new, ActionResult.success()


@_handles(a.RebalanceTeams)
def _rebalance(state: GameState, action: a.RebalanceTeams, now: float) -> Result:
    lineup = state.lineup
    distribute = balance_snake if state.rotation_mode == RotationMode.BALANCED else distribute_standard
    result = distribute(lineup.main_roster_players(), lineup, state.court_limit)
    return state.with_lineup(result.lineup), ActionResult.success(logs=list(result.logs))


@_handles(a.GenerateTeams)
def _generate_teams(state: GameState, action: a.GenerateTeams, now: float) -> Result:
    """Replace every main roster and the queue; court benches stay."""
    structure = Lineup(replace(state.team_a, players=()), replace(state.team_b, players=()), ())
    result = distribute_standard(action.players, structure, state.court_limit)
    new = replace(state.with_lineup(result.lineup), rotation_report=None)
    return new, ActionResult.success(count=len(action.players))


@_handles(a.SyncProfiles)
def _sync_profiles(state: GameState, action: a.SyncProfiles, now: float) -> Result:
    profiles = {p.id: p for p in action.profiles}
    return state.with_lineup(roster.sync_profiles(state.lineup, profiles)), ActionResult.success()


@_handles(a.UnlinkProfile)
def _unlink_profile(state: GameState, action: a.UnlinkProfile, now: float) -> Result:
    return state.with_lineup(roster.unlink_profile(state.lineup, action.profile_id)), ActionResult.success()
