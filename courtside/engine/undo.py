"""
UndoLog: tagged history entries and their inverses.

The per-set action_log holds one entry per undoable action; undo pops the
newest and applies its inverse. Set and match boundaries clear the log and
keep the whole pre-boundary state as last_snapshot instead, so undo across a
boundary restores that state wholesale.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Union

from courtside.models import (
    ActionResult,
    Direction,
    Reason,
    RotationReport,
    SkillType,
    Team,
    TeamSide,
)

from .rules import rotate_counter_clockwise, shift_offset

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


# ---------- Entries ----------
@dataclass(frozen=True)
class PointEntry:
    kind: ClassVar[str] = "POINT"
    team: TeamSide
    prev_score_a: int
    prev_score_b: int
    prev_serving_team: TeamSide | None
    prev_in_sudden_death: bool = False
    prev_swapped_sides: bool = False
    auto_rotated: bool = False
    prev_tactical_offset: int = 0
    player_id: str | None = None
    skill: SkillType | None = None
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "team": self.team.value,
            "prev_score_a": self.prev_score_a,
            "prev_score_b": self.prev_score_b,
            "prev_serving_team": self.prev_serving_team.value if self.prev_serving_team else None,
            "prev_in_sudden_death": self.prev_in_sudden_death,
            "prev_swapped_sides": self.prev_swapped_sides,
            "auto_rotated": self.auto_rotated,
            "prev_tactical_offset": self.prev_tactical_offset,
            "player_id": self.player_id,
            "skill": self.skill.value if self.skill else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PointEntry:
        return cls(
            team=TeamSide(d["team"]),
            prev_score_a=d["prev_score_a"],
            prev_score_b=d["prev_score_b"],
            prev_serving_team=TeamSide(d["prev_serving_team"]) if d.get("prev_serving_team") else None,
            prev_in_sudden_death=d.get("prev_in_sudden_death", False),
            prev_swapped_sides=d.get("prev_swapped_sides", False),
            auto_rotated=d.get("auto_rotated", False),
            prev_tactical_offset=d.get("prev_tactical_offset", 0),
            player_id=d.get("player_id"),
            skill=SkillType(d["skill"]) if d.get("skill") else None,
            timestamp=d.get("timestamp", 0.0),
        )


@dataclass(frozen=True)
class TimeoutEntry:
    kind: ClassVar[str] = "TIMEOUT"
    team: TeamSide
    prev_timeouts_a: int
    prev_timeouts_b: int
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "team": self.team.value,
            "prev_timeouts_a": self.prev_timeouts_a,
            "prev_timeouts_b": self.prev_timeouts_b,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimeoutEntry:
        return cls(TeamSide(d["team"]), d["prev_timeouts_a"], d["prev_timeouts_b"], d.get("timestamp", 0.0))


@dataclass(frozen=True)
class RosterSnapshot:
    """Courts, queue and report as they were before a rotation."""
    team_a: Team
    team_b: Team
    queue: tuple[Team, ...]
    rotation_report: RotationReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_a": self.team_a.to_dict(),
            "team_b": self.team_b.to_dict(),
            "queue": [t.to_dict() for t in self.queue],
            "rotation_report": self.rotation_report.to_dict() if self.rotation_report else None,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RosterSnapshot:
        report = d.get("rotation_report")
        return cls(
            team_a=Team.from_dict(d["team_a"]),
            team_b=Team.from_dict(d["team_b"]),
            queue=tuple(Team.from_dict(t) for t in d.get("queue", [])),
            rotation_report=RotationReport.from_dict(report) if report else None,
        )


@dataclass(frozen=True)
class RotationEntry:
    kind: ClassVar[str] = "ROTATION"
    snapshot: RosterSnapshot
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "snapshot": self.snapshot.to_dict(), "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RotationEntry:
        return cls(RosterSnapshot.from_dict(d["snapshot"]), d.get("timestamp", 0.0))


@dataclass(frozen=True)
class ManualRotationEntry:
    kind: ClassVar[str] = "MANUAL_ROTATION"
    team: TeamSide
    direction: Direction
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "team": self.team.value,
            "direction": self.direction.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ManualRotationEntry:
        return cls(TeamSide(d["team"]), Direction(d["direction"]), d.get("timestamp", 0.0))


LogEntry = Union[PointEntry, TimeoutEntry, RotationEntry, ManualRotationEntry]

_ENTRY_TYPES: dict[str, type] = {
    cls.kind: cls for cls in (PointEntry, TimeoutEntry, RotationEntry, ManualRotationEntry)
}


def entry_to_dict(entry: LogEntry) -> dict[str, Any]:
    return entry.to_dict()


def entry_from_dict(d: dict[str, Any]) -> LogEntry:
    cls = _ENTRY_TYPES.get(d.get("type", ""))
    if cls is None:
        raise ValueError(f"Unknown log entry type: {d.get('type')!r}")
    return cls.from_dict(d)


def last_scorer(match_log: tuple[LogEntry, ...]) -> TeamSide | None:
    for entry in reversed(match_log):
        if isinstance(entry, PointEntry):
            return entry.team
    return None


# ---------- Inverses ----------
def _undo_point(state: GameState, entry: PointEntry) -> GameState:
    if entry.auto_rotated:
        team = state.team(entry.team)
        team = replace(
            team,
            players=rotate_counter_clockwise(team.players),
            tactical_offset=entry.prev_tactical_offset,
        )
        state = state.with_team(entry.team, team)
    return replace(
        state,
        score_a=entry.prev_score_a,
        score_b=entry.prev_score_b,
        serving_team=entry.prev_serving_team,
        in_sudden_death=entry.prev_in_sudden_death,
        swapped_sides=entry.prev_swapped_sides,
        pending_side_switch=False,
    )


def _undo_timeout(state: GameState, entry: TimeoutEntry) -> GameState:
    return replace(state, timeouts_a=entry.prev_timeouts_a, timeouts_b=entry.prev_timeouts_b)


def _undo_rotation(state: GameState, entry: RotationEntry) -> GameState:
    snap = entry.snapshot
    return replace(
        state,
        team_a=snap.team_a,
        team_b=snap.team_b,
        queue=snap.queue,
        rotation_report=snap.rotation_report,
    )


def _undo_manual_rotation(state: GameState, entry: ManualRotationEntry) -> GameState:
    back = Direction.COUNTER if entry.direction == Direction.CLOCKWISE else Direction.CLOCKWISE
    return state.with_team(entry.team, shift_offset(state.team(entry.team), back))


_INVERSES: dict[type, Callable[[Any, Any], Any]] = {
    PointEntry: _undo_point,
    TimeoutEntry: _undo_timeout,
    RotationEntry: _undo_rotation,
    ManualRotationEntry: _undo_manual_rotation,
}


def undo(state: GameState) -> tuple[GameState, ActionResult]:
    """Revert exactly one logical action."""
    if state.action_log:
        entry = state.action_log[-1]
        match_log = state.match_log
        if match_log and match_log[-1] == entry:
            match_log = match_log[:-1]
        new = _INVERSES[type(entry)](state, entry)
        new = replace(new, action_log=state.action_log[:-1], match_log=match_log)
        new = replace(new, last_scorer_team=last_scorer(new.match_log))
        logger.debug("undo %s", entry.kind)
        return new, ActionResult.success(undone=entry.kind)
    if state.last_snapshot is not None:
        logger.debug("undo: restoring boundary snapshot")
        return state.last_snapshot, ActionResult.success(undone="SNAPSHOT")
    return state, ActionResult.failure(Reason.NOTHING_TO_UNDO)
