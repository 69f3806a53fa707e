"""
Lineup: court A, court B and the waiting queue, addressed by slot.
Slot 0 is court A, slot 1 is court B, slot 2+ is queue[slot - 2].
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator

from courtside.models import Player, Team, clamp_skill, normalize_number, sanitize_name

COURT_A_SLOT = 0
COURT_B_SLOT = 1
KNOCKED_OUT_TEAM_NAME = "Knocked Out"

_TEAM_NUMBER = re.compile(r"Team\s+(\d+)", re.IGNORECASE)


def new_id() -> str:
    return str(uuid.uuid4())


def create_player(
    name: str,
    index: int,
    profile_id: str | None = None,
    skill_level: int = 5,
    number: str | None = None,
    player_id: str | None = None,
) -> Player:
    return Player(
        id=player_id or new_id(),
        name=sanitize_name(name),
        skill_level=clamp_skill(skill_level),
        number=normalize_number(number),
        profile_id=profile_id,
        original_index=index,
        display_order=index,
    )


def create_team(name: str, players: Iterable[Player] = (), color: str = "slate") -> Team:
    return Team(id=new_id(), name=sanitize_name(name), color=color, players=tuple(players))


def number_conflict(roster: Iterable[Player], number: str | None, exclude_id: str | None = None) -> Player | None:
    """Player in roster already wearing number, ignoring exclude_id. Blank numbers never conflict."""
    number = normalize_number(number)
    if number is None:
        return None
    for p in roster:
        if p.number == number and p.id != exclude_id:
            return p
    return None


def renumber(players: Iterable[Player]) -> tuple[Player, ...]:
    """Reset display_order to list position."""
    return tuple(p if p.display_order == i else replace(p, display_order=i) for i, p in enumerate(players))


@dataclass(frozen=True)
class Lineup:
    """Everything a roster, balancing or rotation operation reads and rewrites."""
    court_a: Team
    court_b: Team
    queue: tuple[Team, ...] = ()

    def teams(self) -> tuple[Team, ...]:
        return (self.court_a, self.court_b) + self.queue

    def team_at(self, slot: int) -> Team:
        if slot == COURT_A_SLOT:
            return self.court_a
        if slot == COURT_B_SLOT:
            return self.court_b
        return self.queue[slot - 2]

    def with_team(self, slot: int, team: Team) -> Lineup:
        if slot == COURT_A_SLOT:
            return replace(self, court_a=team)
        if slot == COURT_B_SLOT:
            return replace(self, court_b=team)
        queue = list(self.queue)
        queue[slot - 2] = team
        return replace(self, queue=tuple(queue))

    def slot_of(self, team_ref: str) -> int | None:
        """Resolve "A", "B" or a team id to a slot."""
        if team_ref == "A" or team_ref == self.court_a.id:
            return COURT_A_SLOT
        if team_ref == "B" or team_ref == self.court_b.id:
            return COURT_B_SLOT
        for i, team in enumerate(self.queue):
            if team.id == team_ref:
                return i + 2
        return None

    def slot_ref(self, slot: int) -> str:
        """Inverse of slot_of: "A"/"B" for courts, team id for queue teams."""
        if slot == COURT_A_SLOT:
            return "A"
        if slot == COURT_B_SLOT:
            return "B"
        return self.queue[slot - 2].id

    def locate(self, player_id: str) -> tuple[int, bool] | None:
        """(slot, on_bench) of a player, or None."""
        for slot, team in enumerate(self.teams()):
            if any(p.id == player_id for p in team.players):
                return slot, False
            if any(p.id == player_id for p in team.reserves):
                return slot, True
        return None

    def find_player(self, player_id: str) -> Player | None:
        for p in self.all_players():
            if p.id == player_id:
                return p
        return None

    def all_players(self) -> Iterator[Player]:
        for team in self.teams():
            yield from team.players
            yield from team.reserves

    def main_roster_players(self) -> list[Player]:
        """On-court lists of every team (benches excluded)."""
        return [p for team in self.teams() for p in team.players]

    def player_ids(self) -> list[str]:
        return [p.id for p in self.all_players()]

    def map_players(self, fn: Callable[[Player], Player]) -> Lineup:
        def _team(team: Team) -> Team:
            return replace(
                team,
                players=tuple(fn(p) for p in team.players),
                reserves=tuple(fn(p) for p in team.reserves),
            )
        return Lineup(_team(self.court_a), _team(self.court_b), tuple(_team(t) for t in self.queue))

    def next_team_name(self) -> str:
        """"Team N" with N one above the highest numbered team name in play."""
        highest = 0
        for team in self.teams():
            m = _TEAM_NUMBER.search(team.name)
            if m:
                highest = max(highest, int(m.group(1)))
        return f"Team {highest + 1}"
