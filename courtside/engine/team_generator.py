"""
Team generation from pasted text: one player per line, e.g.

    7 Ana Silva 8     number, name, skill
    12 Bruno          number, name
    Carla 6           name, skill (a trailing value above 10 is a number)
    Davi              name only
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable

from courtside.models import Player, clamp_skill, sanitize_name
from courtside.profiles import PlayerProfile

from .lineup import create_player

logger = logging.getLogger(__name__)

DEFAULT_SKILL = 5
MAX_SKILL = 10


@dataclass(frozen=True)
class ParsedLine:
    name: str
    number: str | None = None
    skill: int | None = None


def parse_line(line: str) -> ParsedLine | None:
    tokens = line.split()
    if not tokens:
        return None
    first, last = tokens[0], tokens[-1]
    if len(tokens) > 2 and first.isdigit() and last.isdigit():
        return ParsedLine(" ".join(tokens[1:-1]), number=first, skill=clamp_skill(int(last)))
    if len(tokens) > 1 and first.isdigit():
        return ParsedLine(" ".join(tokens[1:]), number=first)
    if len(tokens) > 1 and last.isdigit():
        value = int(last)
        rest = " ".join(tokens[:-1])
        if value <= MAX_SKILL:
            return ParsedLine(rest, skill=clamp_skill(value))
        return ParsedLine(rest, number=last)
    return ParsedLine(" ".join(tokens))


def build_players(
    lines: Iterable[str],
    start_index: int = 0,
    find_profile: Callable[[str], PlayerProfile | None] | None = None,
) -> list[Player]:
    """
    Parse lines into players. A profile whose name matches (case-insensitive)
    is linked and fills in skill and number the line leaves out. A number
    already taken by an earlier line is dropped.
    """
    players: list[Player] = []
    seen_numbers: set[str] = set()
    for line in lines:
        parsed = parse_line(line)
        if parsed is None or not sanitize_name(parsed.name):
            continue
        profile = find_profile(parsed.name) if find_profile else None
        skill = parsed.skill
        number = parsed.number
        if profile is not None:
            skill = profile.skill_level if skill is None else skill
            number = profile.number if number is None else number
        if number is not None and number in seen_numbers:
            logger.warning("team generation: number %s repeated for %s, dropped", number, parsed.name)
            number = None
        if number is not None:
            seen_numbers.add(number)
        player = create_player(
            parsed.name,
            start_index + len(players),
            profile_id=profile.id if profile else None,
            skill_level=DEFAULT_SKILL if skill is None else skill,
            number=number,
        )
        if profile is not None:
            player = replace(player, role=profile.role)
        players.append(player)
    return players