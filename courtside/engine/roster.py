"""
Roster operations: pure functions over a Lineup.
Each returns (new_lineup, ActionResult); a failed result always comes with
the lineup it was given.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from courtside.models import (
    ActionResult,
    DeletedPlayerRecord,
    Location,
    Player,
    PlayerRole,
    Reason,
    Team,
    clamp_skill,
    normalize_number,
    sanitize_name,
)
from courtside.profiles import PlayerProfile

from .lineup import (
    KNOCKED_OUT_TEAM_NAME,
    Lineup,
    create_team,
    number_conflict,
    renumber,
)

logger = logging.getLogger(__name__)

RosterChange = tuple[Lineup, ActionResult]


def _conflict(player: Player, holder: Player) -> ActionResult:
    return ActionResult.failure(
        Reason.NUMBER_CONFLICT,
        message=f"Number {player.number} is already worn by {holder.name}",
        conflict_id=holder.id,
        conflict_name=holder.name,
    )


def _without(team: Team, player_id: str) -> Team:
    return replace(
        team,
        players=tuple(p for p in team.players if p.id != player_id),
        reserves=tuple(p for p in team.reserves if p.id != player_id),
    )


def _bench_player(team: Team, player: Player) -> Team:
    reserves = team.reserves + (replace(player, display_order=len(team.reserves)),)
    return replace(team, reserves=reserves, has_active_bench=True)


def append_to_queue_tail(lineup: Lineup, player: Player, court_limit: int, new_team_name: str | None = None) -> Lineup:
    """
    Global queue tail: last queue team if it has court space and no number
    clash, otherwise a brand new queue team.
    """
    if lineup.queue:
        last = lineup.queue[-1]
        if len(last.players) < court_limit and number_conflict(last.roster, player.number, player.id) is None:
            updated = replace(last, players=last.players + (replace(player, display_order=len(last.players)),))
            return replace(lineup, queue=lineup.queue[:-1] + (updated,))
    name = new_team_name or lineup.next_team_name()
    team = create_team(name, (replace(player, display_order=0),))
    return replace(lineup, queue=lineup.queue + (team,))


# ---------- Add ----------
def add_player(lineup: Lineup, player: Player, target: Location, court_limit: int, bench_limit: int) -> RosterChange:
    """
    Place a new player. The number is checked against the destination team's
    combined roster before anything else.
    """
    if lineup.locate(player.id) is not None:
        return lineup, ActionResult.failure(Reason.DUPLICATE_PLAYER, message=f"Player {player.id} already placed")

    if target.is_global_queue:
        if lineup.queue and len(lineup.queue[-1].players) < court_limit:
            holder = number_conflict(lineup.queue[-1].roster, player.number, player.id)
            if holder is not None:
                return lineup, _conflict(player, holder)
        new = append_to_queue_tail(lineup, player, court_limit)
        return new, ActionResult.success(team_id=new.queue[-1].id)

    slot = lineup.slot_of(target.team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND, message=f"No team {target.team_ref}")
    team = lineup.team_at(slot)
    holder = number_conflict(team.roster, player.number, player.id)
    if holder is not None:
        return lineup, _conflict(player, holder)

    if target.bench:
        if len(team.reserves) >= bench_limit:
            return lineup, ActionResult.failure(Reason.BENCH_FULL, message=f"{team.name} bench is full")
        return lineup.with_team(slot, _bench_player(team, player)), ActionResult.success(team_id=team.id, bench=True)

    if len(team.players) < court_limit:
        placed = replace(player, display_order=len(team.players))
        return lineup.with_team(slot, replace(team, players=team.players + (placed,))), ActionResult.success(
            team_id=team.id, bench=False
        )
    if team.has_active_bench and len(team.reserves) < bench_limit:
        return lineup.with_team(slot, _bench_player(team, player)), ActionResult.success(team_id=team.id, bench=True)
    return lineup, ActionResult.failure(Reason.ROSTER_FULL, message=f"{team.name} is full")


def next_original_index(lineup: Lineup) -> int:
    return max((p.original_index for p in lineup.all_players()), default=-1) + 1


# ---------- Remove / delete ----------
def remove_player(lineup: Lineup, player_id: str, court_limit: int, bench_limit: int) -> RosterChange:
    """
    Knockout: on-court players drop to their own bench when it has room
    (queue teams only with an active bench); anyone else goes to the global
    queue tail, under a "Knocked Out" team if a new one is needed.
    """
    found = lineup.locate(player_id)
    if found is None:
        logger.warning("remove: player %s not found", player_id)
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    slot, on_bench = found
    team = lineup.team_at(slot)
    player = next(p for p in team.roster if p.id == player_id)
    stripped = _without(team, player_id)

    benchable = not on_bench and (slot < 2 or team.has_active_bench)
    if benchable and len(stripped.reserves) < bench_limit:
        return lineup.with_team(slot, _bench_player(stripped, player)), ActionResult.success(
            destination=str(Location(lineup.slot_ref(slot), bench=True))
        )

    new = append_to_queue_tail(lineup.with_team(slot, stripped), player, court_limit, KNOCKED_OUT_TEAM_NAME)
    return new, ActionResult.success(destination=new.queue[-1].id)


def delete_player(lineup: Lineup, player_id: str, now: float) -> tuple[Lineup, DeletedPlayerRecord | None, ActionResult]:
    found = lineup.locate(player_id)
    if found is None:
        logger.warning("delete: player %s not found", player_id)
        return lineup, None, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    slot, on_bench = found
    team = lineup.team_at(slot)
    player = next(p for p in team.roster if p.id == player_id)
    origin = Location(lineup.slot_ref(slot), bench=on_bench)
    record = DeletedPlayerRecord(player=player, origin=str(origin), timestamp=now)
    return lineup.with_team(slot, _without(team, player_id)), record, ActionResult.success(origin=str(origin))


def restore_deleted(lineup: Lineup, record: DeletedPlayerRecord, court_limit: int, bench_limit: int) -> RosterChange:
    """Put a deleted player back where it came from, or at the global queue tail."""
    player = record.player
    origin = Location.parse(record.origin)
    slot = lineup.slot_of(origin.team_ref)
    if slot is not None:
        team = lineup.team_at(slot)
        limit = bench_limit if origin.bench else court_limit
        target = team.reserves if origin.bench else team.players
        clash = number_conflict(team.roster, player.number, player.id)
        if len(target) < limit and clash is None:
            placed = replace(player, display_order=len(target))
            if origin.bench:
                team = replace(team, reserves=team.reserves + (placed,), has_active_bench=True)
            else:
                team = replace(team, players=team.players + (placed,))
            return lineup.with_team(slot, team), ActionResult.success(destination=record.origin)

    logger.info("undo delete: origin %s unavailable, sending %s to queue", record.origin, player.name)
    new = append_to_queue_tail(lineup, player, court_limit)
    return new, ActionResult.success(destination=new.queue[-1].id)


# ---------- Move / substitute ----------
def move_player(
    lineup: Lineup,
    player_id: str,
    source: Location,
    dest: Location,
    court_limit: int,
    bench_limit: int,
    index: int | None = None,
) -> RosterChange:
    src_slot = lineup.slot_of(source.team_ref)
    if src_slot is None:
        logger.warning("move: source %s not found", source)
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    src_team = lineup.team_at(src_slot)
    src_list = src_team.reserves if source.bench else src_team.players
    player = next((p for p in src_list if p.id == player_id), None)
    if player is None:
        logger.warning("move: player %s not at %s", player_id, source)
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)

    if dest.is_global_queue:
        stripped = lineup.with_team(src_slot, _without(src_team, player_id))
        new = append_to_queue_tail(stripped, player, court_limit)
        return new, ActionResult.success(destination=new.queue[-1].id)

    dst_slot = lineup.slot_of(dest.team_ref)
    if dst_slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND, message=f"No team {dest.team_ref}")
    dst_team = lineup.team_at(dst_slot)
    same_list = dst_slot == src_slot and dest.bench == source.bench

    if not same_list:
        dst_list = dst_team.reserves if dest.bench else dst_team.players
        if dest.bench and len(dst_list) >= bench_limit:
            return lineup, ActionResult.failure(Reason.BENCH_FULL, message=f"{dst_team.name} bench is full")
        if not dest.bench and len(dst_list) >= court_limit:
            return lineup, ActionResult.failure(Reason.ROSTER_FULL, message=f"{dst_team.name} is full")
        if dst_slot != src_slot:
            holder = number_conflict(dst_team.roster, player.number, player.id)
            if holder is not None:
                return lineup, _conflict(player, holder)

    stripped = lineup.with_team(src_slot, _without(src_team, player_id))
    dst_team = stripped.team_at(dst_slot)
    dst_list = list(dst_team.reserves if dest.bench else dst_team.players)
    at = len(dst_list) if index is None else max(0, min(index, len(dst_list)))
    dst_list.insert(at, player)
    if dest.bench:
        dst_team = replace(dst_team, reserves=renumber(dst_list), has_active_bench=True)
    else:
        dst_team = replace(dst_team, players=renumber(dst_list), tactical_offset=0)
    return stripped.with_team(dst_slot, dst_team), ActionResult.success(destination=str(dest), index=at)


def substitute(lineup: Lineup, team_ref: str, out_id: str, in_id: str) -> RosterChange:
    """Swap an on-court player with a bench player, each taking the other's position."""
    slot = lineup.slot_of(team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND)
    team = lineup.team_at(slot)
    out_idx = next((i for i, p in enumerate(team.players) if p.id == out_id), None)
    in_idx = next((i for i, p in enumerate(team.reserves) if p.id == in_id), None)
    if out_idx is None or in_idx is None:
        logger.warning("substitute: %s/%s not found on %s", out_id, in_id, team.name)
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    players = list(team.players)
    reserves = list(team.reserves)
    players[out_idx], reserves[in_idx] = reserves[in_idx], players[out_idx]
    return lineup.with_team(slot, replace(team, players=renumber(players), reserves=renumber(reserves))), ActionResult.success()


def swap_positions(lineup: Lineup, team_ref: str, index_a: int, index_b: int) -> RosterChange:
    slot = lineup.slot_of(team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND)
    team = lineup.team_at(slot)
    n = len(team.players)
    if not (0 <= index_a < n and 0 <= index_b < n):
        return lineup, ActionResult.failure(Reason.INVALID_INDEX)
    players = list(team.players)
    players[index_a], players[index_b] = players[index_b], players[index_a]
    return lineup.with_team(slot, replace(team, players=renumber(players), tactical_offset=0)), ActionResult.success()


# ---------- Player edits ----------
EDITABLE_FIELDS = ("name", "number", "skill_level", "role", "is_fixed", "profile_id")


def update_player(lineup: Lineup, player_id: str, changes: dict[str, Any]) -> RosterChange:
    found = lineup.locate(player_id)
    if found is None:
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    slot, _ = found
    team = lineup.team_at(slot)
    player = next(p for p in team.roster if p.id == player_id)

    clean: dict[str, Any] = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    if "name" in clean:
        clean["name"] = sanitize_name(clean["name"]) or player.name
    try:
        if "skill_level" in clean:
            clean["skill_level"] = clamp_skill(clean["skill_level"])
        if "role" in clean:
            clean["role"] = PlayerRole(clean["role"])
    except (TypeError, ValueError) as e:
        logger.warning("update %s rejected: %s", player_id, e)
        return lineup, ActionResult.failure(Reason.INVALID_VALUE, message=str(e))
    if "number" in clean:
        clean["number"] = normalize_number(clean["number"])
        holder = number_conflict(team.roster, clean["number"], player_id)
        if holder is not None:
            return lineup, _conflict(replace(player, number=clean["number"]), holder)

    updated = replace(player, **clean)
    return lineup.map_players(lambda p: updated if p.id == player_id else p), ActionResult.success()


def toggle_fixed(lineup: Lineup, player_id: str) -> RosterChange:
    player = lineup.find_player(player_id)
    if player is None:
        return lineup, ActionResult.failure(Reason.PLAYER_NOT_FOUND)
    return update_player(lineup, player_id, {"is_fixed": not player.is_fixed})


# ---------- Team edits ----------
def _edit_team(lineup: Lineup, team_ref: str, **changes: Any) -> RosterChange:
    slot = lineup.slot_of(team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND)
    return lineup.with_team(slot, replace(lineup.team_at(slot), **changes)), ActionResult.success()


def toggle_bench(lineup: Lineup, team_ref: str) -> RosterChange:
    slot = lineup.slot_of(team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND)
    team = lineup.team_at(slot)
    return _edit_team(lineup, team_ref, has_active_bench=not team.has_active_bench)


def rename_team(lineup: Lineup, team_ref: str, name: str) -> RosterChange:
    clean = sanitize_name(name)
    if not clean:
        return lineup, ActionResult.failure(Reason.INVALID_VALUE, message="Team name is empty")
    return _edit_team(lineup, team_ref, name=clean)


def set_team_color(lineup: Lineup, team_ref: str, color: str) -> RosterChange:
    return _edit_team(lineup, team_ref, color=color)


def set_team_logo(lineup: Lineup, team_ref: str, logo: str | None) -> RosterChange:
    return _edit_team(lineup, team_ref, logo=logo)


def _number_key(p: Player) -> tuple[int, int, str]:
    if p.number is None:
        return (2, 0, "")
    if p.number.isdigit():
        return (0, int(p.number), "")
    return (1, 0, p.number)


SORT_KEYS = {
    "name": lambda p: p.name.lower(),
    "number": _number_key,
    "skill": lambda p: -p.skill_level,
}


def sort_team(lineup: Lineup, team_ref: str, criteria: str) -> RosterChange:
    """Sort the on-court list; changes serve order, so the tactical offset resets."""
    key = SORT_KEYS.get(criteria)
    if key is None:
        return lineup, ActionResult.failure(Reason.INVALID_VALUE, message=f"Unknown sort {criteria!r}")
    slot = lineup.slot_of(team_ref)
    if slot is None:
        return lineup, ActionResult.failure(Reason.TEAM_NOT_FOUND)
    team = lineup.team_at(slot)
    players = renumber(sorted(team.players, key=key))
    return lineup.with_team(slot, replace(team, players=players, tactical_offset=0)), ActionResult.success()


# ---------- Queue management ----------
def reorder_queue(lineup: Lineup, from_index: int, to_index: int) -> RosterChange:
    n = len(lineup.queue)
    if not (0 <= from_index < n and 0 <= to_index < n):
        return lineup, ActionResult.failure(Reason.INVALID_INDEX)
    queue = list(lineup.queue)
    queue.insert(to_index, queue.pop(from_index))
    return replace(lineup, queue=tuple(queue)), ActionResult.success()


def disband_team(lineup: Lineup, team_id: str) -> tuple[Lineup, tuple[Team, int] | None, ActionResult]:
    """Remove a queue team with its players. Returns the team and its index for restore."""
    for i, team in enumerate(lineup.queue):
        if team.id == team_id:
            queue = lineup.queue[:i] + lineup.queue[i + 1:]
            return replace(lineup, queue=queue), (team, i), ActionResult.success(index=i)
    return lineup, None, ActionResult.failure(Reason.TEAM_NOT_FOUND)


def restore_team(lineup: Lineup, team: Team, index: int, court_limit: int, bench_limit: int) -> RosterChange:
    """Put a disbanded team back into the queue. The team must still fit the current court and bench."""
    if lineup.slot_of(team.id) is not None:
        return lineup, ActionResult.failure(Reason.DUPLICATE_PLAYER, message=f"{team.name} is already in play")
    placed = set(lineup.player_ids())
    if any(p.id in placed for p in team.roster):
        return lineup, ActionResult.failure(Reason.DUPLICATE_PLAYER, message=f"{team.name} shares players with the lineup")
    if len(team.players) > court_limit:
        return lineup, ActionResult.failure(Reason.ROSTER_FULL, message=f"{team.name} has more than {court_limit} players")
    if len(team.reserves) > bench_limit:
        return lineup, ActionResult.failure(Reason.BENCH_FULL, message=f"{team.name} bench is over {bench_limit}")
    members = team.roster
    for i, player in enumerate(members):
        holder = number_conflict(members[:i], player.number, player.id)
        if holder is not None:
            return lineup, _conflict(player, holder)
    at = max(0, min(index, len(lineup.queue)))
    queue = lineup.queue[:at] + (team,) + lineup.queue[at:]
    return replace(lineup, queue=queue), ActionResult.success(index=at)


def reset_rosters(lineup: Lineup) -> Lineup:
    """Empty both courts (keeping their identity) and drop the queue."""
    def _clear(team: Team) -> Team:
        return replace(team, players=(), reserves=(), has_active_bench=False, tactical_offset=0)
    return Lineup(_clear(lineup.court_a), _clear(lineup.court_b), ())


# ---------- Profile links ----------
def unlink_profile(lineup: Lineup, profile_id: str) -> Lineup:
    return lineup.map_players(lambda p: replace(p, profile_id=None) if p.profile_id == profile_id else p)


def sync_profiles(lineup: Lineup, profiles: Mapping[str, PlayerProfile]) -> Lineup:
    """
    Copy name, skill and role from linked profiles onto their players. The
    profile number is copied only where it does not clash inside the team.
    """
    for team in lineup.teams():
        for player in team.roster:
            profile = profiles.get(player.profile_id) if player.profile_id else None
            if profile is None:
                continue
            changes: dict[str, Any] = {
                "name": sanitize_name(profile.name) or player.name,
                "skill_level": clamp_skill(profile.skill_level),
                "role": profile.role,
            }
            number = normalize_number(profile.number)
            current = lineup.team_at(lineup.slot_of(team.id))
            if number_conflict(current.roster, number, player.id) is None:
                changes["number"] = number
            updated = replace(player, **changes)
            if updated != player:
                lineup = lineup.map_players(lambda p, u=updated: u if p.id == u.id else p)
    return lineup
