"""
Player Profile Store: persistent identities (name, skill, number, role)
that roster players can link to. Players copy profile fields when linked;
sync pushes later profile edits back onto linked players.
"""
from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from courtside.models import PlayerRole, clamp_skill, normalize_number, sanitize_name


@dataclass
class PlayerProfile:
    """Saved player identity, reused across sessions."""
    id: str
    name: str
    skill_level: int = 5
    number: str | None = None
    role: PlayerRole = PlayerRole.NONE
    updated_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "skill_level": self.skill_level,
            "number": self.number,
            "role": self.role.value,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PlayerProfile:
        return cls(
            id=d["id"],
            name=d["name"],
            skill_level=d.get("skill_level", 5),
            number=d.get("number"),
            role=PlayerRole(d.get("role") or PlayerRole.NONE.value),
            updated_at=d.get("updated_at", 0.0),
        )


def new_profile(name: str, skill_level: int = 5, number: str | None = None, role: PlayerRole = PlayerRole.NONE) -> PlayerProfile:
    return PlayerProfile(
        id=str(uuid.uuid4()),
        name=sanitize_name(name),
        skill_level=clamp_skill(skill_level),
        number=normalize_number(number),
        role=role,
        updated_at=time.time(),
    )


class ProfileStore:
    """
    Holds and retrieves player profiles by id, or by name (case-insensitive).
    Can load from a directory of JSON files.
    """

    def __init__(self, profiles: list[PlayerProfile] | None = None) -> None:
        self._profiles: dict[str, PlayerProfile] = {}
        for p in profiles or []:
            self.upsert(p)

    def get(self, profile_id: str) -> PlayerProfile | None:
        return self._profiles.get(profile_id)

    def upsert(self, profile: PlayerProfile) -> PlayerProfile:
        self._profiles[profile.id] = profile
        return profile

    def delete(self, profile_id: str) -> bool:
        return self._profiles.pop(profile_id, None) is not None

    def find_by_name(self, name: str) -> PlayerProfile | None:
        key = name.strip().lower()
        for p in self._profiles.values():
            if p.name.lower() == key:
                return p
        return None

    def all(self) -> list[PlayerProfile]:
        return sorted(self._profiles.values(), key=lambda p: p.name.lower())

    def __len__(self) -> int:
        return len(self._profiles)

    def load_from_dir(self, directory: str | Path) -> None:
        path = Path(directory)
        for f in path.glob("*.json"):
            try:
                data = json.loads(f.read_text())
                if "id" in data and "name" in data:
                    self.upsert(PlayerProfile.from_dict(data))
            except (json.JSONDecodeError, KeyError, ValueError):
                continue

    def save_profile(self, profile: PlayerProfile, directory: str | Path) -> Path:
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        filepath = path / f"{profile.id}.json"
        filepath.write_text(json.dumps(profile.to_dict(), indent=2))
        return filepath
