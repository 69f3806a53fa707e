"""
Game rules and court presets.
GameConfig is read-only from the engine's point of view; it is replaced
wholesale by the apply-settings action.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class GameMode(str, Enum):
    INDOOR = "indoor"
    BEACH = "beach"


class DeuceType(str, Enum):
    STANDARD = "standard"
    SUDDEN_DEATH_3PT = "sudden_death_3pt"


class RotationMode(str, Enum):
    """How an incomplete incoming roster is filled from the queue."""
    STANDARD = "standard"
    BALANCED = "balanced"


# ---------- Rule constants ----------
MIN_LEAD_TO_WIN = 2
SUDDEN_DEATH_POINTS = 3
MAX_SCORE = 200  # runaway ceiling
MAX_TIMEOUTS_PER_SET = 2
SIDE_SWITCH_INTERVAL = 7
TIE_BREAK_SIDE_SWITCH_INTERVAL = 5


@dataclass(frozen=True)
class CourtPreset:
    """Named court layout. Only capacities matter to the engine."""
    name: str
    label: str
    mode: GameMode
    players_on_court: int
    bench_limit: int


PRESETS: dict[str, CourtPreset] = {
    "indoor-6v6": CourtPreset("indoor-6v6", "Indoor 6v6", GameMode.INDOOR, 6, 6),
    "quads-5v5": CourtPreset("quads-5v5", "Quads 5v5", GameMode.INDOOR, 5, 4),
    "beach-4v4": CourtPreset("beach-4v4", "Beach 4v4", GameMode.BEACH, 4, 3),
    "triples-3v3": CourtPreset("triples-3v3", "Triples 3v3", GameMode.BEACH, 3, 2),
    "beach-2v2": CourtPreset("beach-2v2", "Beach Doubles 2v2", GameMode.BEACH, 2, 1),
}


def preset_for(mode: GameMode | str, players_on_court: int | None = None) -> CourtPreset:
    """Preset matching a player count if given, else the default for the mode."""
    if players_on_court is not None:
        for preset in PRESETS.values():
            if preset.players_on_court == players_on_court:
                return preset
    if GameMode(mode) == GameMode.BEACH:
        return PRESETS["beach-4v4"]
    return PRESETS["indoor-6v6"]


@dataclass(frozen=True)
class GameConfig:
    """Match rules. Defaults follow official indoor play: best of 5, 25 points, tie-break to 15."""
    mode: GameMode = GameMode.INDOOR
    preset: str = "indoor-6v6"
    max_sets: int = 5  # 1, 3 or 5
    points_per_set: int = 25
    has_tie_break: bool = True
    tie_break_points: int = 15
    deuce_type: DeuceType = DeuceType.STANDARD
    auto_swap_sides: bool = True
    max_timeouts: int = MAX_TIMEOUTS_PER_SET
    min_lead: int = MIN_LEAD_TO_WIN

    @property
    def court_preset(self) -> CourtPreset:
        return PRESETS.get(self.preset) or preset_for(self.mode)

    @property
    def court_limit(self) -> int:
        return self.court_preset.players_on_court

    @property
    def bench_limit(self) -> int:
        return self.court_preset.bench_limit

    def is_tie_break_set(self, set_number: int) -> bool:
        return self.has_tie_break and set_number == self.max_sets

    def target_points(self, set_number: int) -> int:
        if self.is_tie_break_set(set_number):
            return self.tie_break_points
        return self.points_per_set

    def with_changes(self, **changes: Any) -> GameConfig:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "preset": self.preset,
            "max_sets": self.max_sets,
            "points_per_set": self.points_per_set,
            "has_tie_break": self.has_tie_break,
            "tie_break_points": self.tie_break_points,
            "deuce_type": self.deuce_type.value,
            "auto_swap_sides": self.auto_swap_sides,
            "max_timeouts": self.max_timeouts,
            "min_lead": self.min_lead,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> GameConfig:
        mode = GameMode(d.get("mode", GameMode.INDOOR.value))
        preset = d.get("preset") or preset_for(mode).name
        return cls(
            mode=mode,
            preset=preset,
            max_sets=d.get("max_sets", 5),
            points_per_set=d.get("points_per_set", 25),
            has_tie_break=d.get("has_tie_break", True),
            tie_break_points=d.get("tie_break_points", 15),
            deuce_type=DeuceType(d.get("deuce_type", DeuceType.STANDARD.value)),
            auto_swap_sides=d.get("auto_swap_sides", True),
            max_timeouts=d.get("max_timeouts", MAX_TIMEOUTS_PER_SET),
            min_lead=d.get("min_lead", MIN_LEAD_TO_WIN),
        )
