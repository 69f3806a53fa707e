"""
Winner-stays rotation. The loser goes to the back of the queue intact, the
head of the queue comes on court, and a short incoming roster is filled by
stealing non-fixed players from the queue.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from courtside.config import RotationMode
from courtside.models import Player, RotationReport, Team, TeamSide

from .lineup import Lineup, number_conflict, renumber

logger = logging.getLogger(__name__)


def _can_take(incoming_roster: list[Player], candidate: Player) -> bool:
    return not candidate.is_fixed and number_conflict(incoming_roster, candidate.number, candidate.id) is None


def _fill_standard(
    incoming: Team, queue: list[Team], court_limit: int, logs: list[str]
) -> tuple[list[Player], list[Player]]:
    """Donors head to tail; within a donor, candidates from the tail first."""
    players = list(incoming.players)
    stolen: list[Player] = []
    for di, donor in enumerate(queue):
        if len(players) >= court_limit:
            break
        donor_players = list(donor.players)
        j = len(donor_players) - 1
        while j >= 0 and len(players) < court_limit:
            candidate = donor_players[j]
            if _can_take(players + list(incoming.reserves), candidate):
                players.append(donor_players.pop(j))
                stolen.append(candidate)
                logs.append(f"Took {candidate.name} from {donor.name}")
            j -= 1
        queue[di] = replace(donor, players=renumber(donor_players))
    return players, stolen


def _fill_balanced(
    incoming: Team, queue: list[Team], court_limit: int, target_skill: float, logs: list[str]
) -> tuple[list[Player], list[Player]]:
    """
    Rank every non-fixed queue player by how close its addition brings the
    incoming average to target_skill, each candidate scored on its own
    against the current roster, and take the best N. Greedy, not optimal.
    """
    players = list(incoming.players)
    total = incoming.total_skill()
    count = len(players)
    needed = court_limit - count

    candidates = [(di, p) for di, donor in enumerate(queue) for p in donor.players if not p.is_fixed]
    ranked = sorted(candidates, key=lambda c: abs((total + c[1].skill_level) / (count + 1) - target_skill))

    chosen: list[tuple[int, Player]] = []
    for di, candidate in ranked:
        if len(chosen) >= needed:
            break
        if _can_take(players + [p for _, p in chosen] + list(incoming.reserves), candidate):
            chosen.append((di, candidate))
            logs.append(f"Took {candidate.name} ({candidate.skill_level}) from {queue[di].name}")

    taken_ids = {p.id for _, p in chosen}
    for di, donor in enumerate(queue):
        if any(p.id in taken_ids for p in donor.players):
            queue[di] = replace(donor, players=renumber(p for p in donor.players if p.id not in taken_ids))
    stolen = [p for _, p in chosen]
    return players + stolen, stolen


def rotate(
    winner: Team,
    loser: Team,
    queue: Sequence[Team],
    mode: RotationMode,
    court_limit: int,
) -> RotationReport:
    """
    One post-game rotation. Pure: returns the incoming team and the queue
    afterwards inside the report. With an empty queue the loser comes
    straight back on.
    """
    logs: list[str] = []
    pending = list(queue) + [loser]
    logs.append(f"{loser.name} goes to the back of the queue")
    incoming = pending.pop(0)
    logs.append(f"{incoming.name} steps on court against {winner.name}")
    retained = tuple(p for p in incoming.players if p.is_fixed)

    stolen: list[Player] = []
    players = list(incoming.players)
    if len(players) < court_limit:
        logs.append(f"{incoming.name} needs {court_limit - len(players)} player(s)")
        if RotationMode(mode) == RotationMode.BALANCED:
            players, stolen = _fill_balanced(incoming, pending, court_limit, winner.average_skill(), logs)
        else:
            players, stolen = _fill_standard(incoming, pending, court_limit, logs)
        if len(players) < court_limit:
            logs.append(f"Queue exhausted; {incoming.name} plays with {len(players)}")

    remaining = [t for t in pending if not t.is_empty]
    for t in pending:
        if t.is_empty:
            logs.append(f"Disbanded empty team {t.name}")

    incoming = replace(incoming, players=renumber(players), tactical_offset=0)
    for line in logs:
        logger.debug(line)
    return RotationReport(
        outgoing_team=loser,
        incoming_team=incoming,
        retained_players=retained,
        stolen_players=tuple(stolen),
        queue_after_rotation=tuple(remaining),
        logs=tuple(logs),
    )


def handle_rotate(
    lineup: Lineup, winner_side: TeamSide, mode: RotationMode, court_limit: int
) -> tuple[Lineup, RotationReport | None]:
    """Court-level rotation. No-op (report None) when the queue is empty and both courts are full."""
    if not lineup.queue and len(lineup.court_a.players) >= court_limit and len(lineup.court_b.players) >= court_limit:
        return lineup, None
    if winner_side == TeamSide.A:
        report = rotate(lineup.court_a, lineup.court_b, lineup.queue, mode, court_limit)
        return Lineup(lineup.court_a, report.incoming_team, report.queue_after_rotation), report
    report = rotate(lineup.court_b, lineup.court_a, lineup.queue, mode, court_limit)
    return Lineup(report.incoming_team, lineup.court_b, report.queue_after_rotation), report
