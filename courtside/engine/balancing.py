"""
Balancing: distribute a flat player pool into court A, court B and queue
buckets. Two strategies:
  - standard: restore insertion order, pouring players bucket by bucket
  - snake: skill-weighted; full teams first, each pick to the weakest bucket

Fixed players stay in the bucket they currently occupy. A bucket never takes
a player whose number clashes with the team it becomes (bench included).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Sequence

from courtside.models import Player, Team

from .lineup import Lineup, create_team, number_conflict, renumber

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceResult:
    lineup: Lineup
    logs: tuple[str, ...] = ()


@dataclass(eq=False)
class _Bucket:
    reserved: tuple[Player, ...] = ()
    players: list[Player] = field(default_factory=list)

    def accepts(self, player: Player, limit: int) -> bool:
        if len(self.players) >= limit:
            return False
        return number_conflict(self.players + list(self.reserved), player.number, player.id) is None

    def total_skill(self) -> int:
        return sum(p.skill_level for p in self.players)


def _bucket_count(n: int, limit: int, structure: Lineup) -> int:
    return max(2, math.ceil(n / limit) if limit else 2, len(structure.teams()))


def _make_buckets(structure: Lineup, count: int) -> list[_Bucket]:
    teams = structure.teams()
    return [_Bucket(reserved=teams[i].reserves if i < len(teams) else ()) for i in range(count)]


def _pin_fixed(pool: Sequence[Player], structure: Lineup, buckets: list[_Bucket]) -> set[str]:
    """Pin fixed pool players to the bucket of the team they currently play for."""
    by_id = {p.id: p for p in pool}
    pinned: set[str] = set()
    for i, team in enumerate(structure.teams()):
        for current in team.players:
            p = by_id.get(current.id)
            if p is not None and p.is_fixed and p.id not in pinned:
                buckets[i].players.append(p)
                pinned.add(p.id)
    return pinned


def _grow(buckets: list[_Bucket]) -> _Bucket:
    bucket = _Bucket()
    buckets.append(bucket)
    return bucket


def _assemble(buckets: list[_Bucket], structure: Lineup, logs: list[str]) -> Lineup:
    court_a = replace(structure.court_a, players=renumber(buckets[0].players), tactical_offset=0)
    court_b = replace(structure.court_b, players=renumber(buckets[1].players), tactical_offset=0)
    queue: list[Team] = []
    created: list[Team] = []
    for i, bucket in enumerate(buckets[2:]):
        existing = structure.queue[i] if i < len(structure.queue) else None
        if not bucket.players and (existing is None or not existing.reserves):
            if existing is not None:
                logs.append(f"Dropped empty queue team {existing.name}")
            continue
        if existing is not None:
            team = replace(existing, players=renumber(bucket.players), tactical_offset=0)
        else:
            taken = Lineup(court_a, court_b, structure.queue + tuple(created))
            team = create_team(taken.next_team_name(), renumber(bucket.players))
            created.append(team)
            logs.append(f"Created queue team {team.name}")
        queue.append(team)
    return Lineup(court_a, court_b, tuple(queue))


def distribute_standard(players: Sequence[Player], structure: Lineup, court_limit: int) -> BalanceResult:
    """
    Restore order: pinned fixed players first, then the rest sorted by
    (original_index, id) poured into the first bucket that takes them.
    """
    logs: list[str] = []
    buckets = _make_buckets(structure, _bucket_count(len(players), court_limit, structure))
    pinned = _pin_fixed(players, structure, buckets)
    rest = sorted((p for p in players if p.id not in pinned), key=lambda p: (p.original_index, p.id))

    for p in rest:
        target = next((b for b in buckets if b.accepts(p, court_limit)), None)
        if target is None:
            target = _grow(buckets)
        target.players.append(p)

    logs.append(f"Standard distribution: {len(players)} players into {len(buckets)} buckets")
    logger.debug(logs[-1])
    return BalanceResult(_assemble(buckets, structure, logs), tuple(logs))


def balance_snake(players: Sequence[Player], structure: Lineup, court_limit: int) -> BalanceResult:
    """
    Skill-weighted distribution. The first n // court_limit buckets are filled
    first, each player (strongest first) going to the one with the lowest
    total skill; leftovers fill the remaining buckets in order.
    """
    logs: list[str] = []
    n = len(players)
    buckets = _make_buckets(structure, _bucket_count(n, court_limit, structure))
    pinned = _pin_fixed(players, structure, buckets)
    pool = sorted((p for p in players if p.id not in pinned), key=lambda p: (-p.skill_level, p.original_index, p.id))
    num_full = n // court_limit if court_limit else 0
    priority_count = num_full or len(buckets)

    for p in pool:
        candidates = [i for i in range(min(priority_count, len(buckets))) if buckets[i].accepts(p, court_limit)]
        if candidates:
            best = min(candidates, key=lambda i: (buckets[i].total_skill(), i))
            buckets[best].players.append(p)
            logs.append(f"{p.name} ({p.skill_level}) -> bucket {best + 1}")
            continue
        overflow = next(
            (b for b in buckets[priority_count:] if b.accepts(p, court_limit)),
            None,
        )
        if overflow is None:
            overflow = _grow(buckets)
        overflow.players.append(p)
        logs.append(f"{p.name} ({p.skill_level}) -> overflow bucket {buckets.index(overflow) + 1}")

    for line in logs:
        logger.debug(line)
    return BalanceResult(_assemble(buckets, structure, logs), tuple(logs))
