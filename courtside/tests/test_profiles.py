"""
ProfileStore: lookup by id and name, JSON directory load/save.
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.models import PlayerRole
from courtside.profiles import PlayerProfile, ProfileStore, new_profile


def test_new_profile_cleans_input():
    profile = new_profile("  <Ana>  ", 14, " 7 ", PlayerRole.MIDDLE)
    assert profile.name == "Ana"
    assert profile.skill_level == 10
    assert profile.number == "7"
    assert profile.id


def test_store_lookup():
    store = ProfileStore([PlayerProfile(id="2", name="bruno"), PlayerProfile(id="1", name="Ana")])
    assert len(store) == 2
    assert store.get("1").name == "Ana"
    assert store.find_by_name(" ANA ").id == "1"
    assert store.find_by_name("Carla") is None
    assert [p.id for p in store.all()] == ["1", "2"]
    assert store.delete("1")
    assert not store.delete("1")
    assert len(store) == 1


def test_save_and_load_dir(tmp_path):
    store = ProfileStore()
    profile = PlayerProfile(id="p1", name="Ana", skill_level=8, number="4", role=PlayerRole.LIBERO)
    path = store.save_profile(profile, tmp_path / "profiles")
    assert path.name == "p1.json"
    (tmp_path / "profiles" / "broken.json").write_text("{not json")
    (tmp_path / "profiles" / "other.json").write_text('{"kind": "team"}')

    loaded = ProfileStore()
    loaded.load_from_dir(tmp_path / "profiles")
    assert len(loaded) == 1
    assert loaded.get("p1") == profile
