"""
Team generation from pasted lines.
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.engine.team_generator import ParsedLine, build_players, parse_line
from courtside.models import PlayerRole
from courtside.profiles import PlayerProfile, ProfileStore


class TestParseLine:
    def test_number_name_skill(self):
        assert parse_line("7 Ana Silva 8") == ParsedLine("Ana Silva", number="7", skill=8)

    def test_number_name(self):
        assert parse_line("12 Bruno") == ParsedLine("Bruno", number="12")

    def test_trailing_skill_or_number(self):
        assert parse_line("Carla 6") == ParsedLine("Carla", skill=6)
        assert parse_line("Davi 23") == ParsedLine("Davi", number="23")

    def test_name_only(self):
        assert parse_line("  Elisa  Maria ") == ParsedLine("Elisa Maria")

    def test_skill_clamped(self):
        assert parse_line("3 Hugo 40").skill == 10

    def test_blank(self):
        assert parse_line("") is None
        assert parse_line("   ") is None


def test_build_players_defaults_and_order():
    players = build_players(["Ana", "", "7 Bruno 9", "<>"], start_index=3)
    assert [p.name for p in players] == ["Ana", "Bruno"]
    assert [p.original_index for p in players] == [3, 4]
    assert players[0].skill_level == 5
    assert players[1].number == "7"
    assert players[1].skill_level == 9


def test_build_players_drops_repeated_number():
    players = build_players(["4 Ana", "4 Bruno"])
    assert players[0].number == "4"
    assert players[1].number is None


def test_build_players_links_profiles():
    store = ProfileStore([PlayerProfile(id="pr1", name="Ana Silva", skill_level=9, number="11", role=PlayerRole.SETTER)])
    players = build_players(["ana silva", "Ana Silva 3", "Bruno"], find_profile=store.find_by_name)
    first, second, third = players
    assert first.profile_id == "pr1"
    assert first.skill_level == 9
    assert first.number == "11"
    assert first.role == PlayerRole.SETTER
    # explicit skill wins; profile number already taken
    assert second.skill_level == 3
    assert second.number is None
    assert third.profile_id is None
