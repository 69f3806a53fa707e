"""
Domain models for the scorekeeping engine.
Value objects only: no rules and no persistence.

All models are frozen; operations build new values with dataclasses.replace
and tuples, so a state handed out is never changed behind the caller's back.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------- Enums ----------
class TeamSide(str, Enum):
    """One of the two court teams."""
    A = "A"
    B = "B"

    @property
    def other(self) -> TeamSide:
        return TeamSide.B if self is TeamSide.A else TeamSide.A


class PlayerRole(str, Enum):
    SETTER = "setter"
    HITTER = "hitter"
    MIDDLE = "middle"
    LIBERO = "libero"
    NONE = "none"


class SkillType(str, Enum):
    """How a point was scored (optional point metadata)."""
    ATTACK = "attack"
    BLOCK = "block"
    ACE = "ace"
    OPPONENT_ERROR = "opponent_error"
    GENERIC = "generic"


class Direction(str, Enum):
    CLOCKWISE = "clockwise"
    COUNTER = "counter"


# ---------- Input sanitizing ----------
MAX_NAME_LENGTH = 30
_DANGEROUS_CHARS = re.compile(r"[<>/\"'`\\]")
_SCRIPT_PATTERNS = re.compile(r"(javascript:|data:|vbscript:|on\w+=)", re.IGNORECASE)


def sanitize_name(raw: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Trim, strip markup/script fragments and cap the length of a display name."""
    if not isinstance(raw, str):
        return ""
    clean = raw.strip()
    clean = _SCRIPT_PATTERNS.sub("", clean)
    clean = _DANGEROUS_CHARS.sub("", clean)
    return clean[:max_length]


def normalize_number(number: str | None) -> str | None:
    """Jersey numbers are trimmed strings; blank means no number."""
    if number is None:
        return None
    number = str(number).strip()
    return number or None


def clamp_skill(skill: int) -> int:
    return max(1, min(10, int(skill)))


# ---------- Player ----------
@dataclass(frozen=True)
class Player:
    """
    One roster entry. Owned by exactly one team list (players or reserves).
    original_index is the insertion order used to restore the standard order.
    """
    id: str
    name: str
    skill_level: int = 5
    number: str | None = None
    profile_id: str | None = None
    role: PlayerRole = PlayerRole.NONE
    is_fixed: bool = False
    original_index: int = 0
    display_order: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "skill_level": self.skill_level,
            "number": self.number,
            "profile_id": self.profile_id,
            "role": self.role.value,
            "is_fixed": self.is_fixed,
            "original_index": self.original_index,
            "display_order": self.display_order,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Player:
        return cls(
            id=d["id"],
            name=d["name"],
            skill_level=d.get("skill_level", 5),
            number=d.get("number"),
            profile_id=d.get("profile_id"),
            role=PlayerRole(d.get("role") or PlayerRole.NONE.value),
            is_fixed=d.get("is_fixed", False),
            original_index=d.get("original_index", 0),
            display_order=d.get("display_order"),
        )


# ---------- Team ----------
@dataclass(frozen=True)
class Team:
    """
    A court or queue team. players order encodes the serve rotation
    (index 0 serves). tactical_offset is a display-only rotation.
    """
    id: str
    name: str
    color: str = "slate"
    logo: str | None = None
    players: tuple[Player, ...] = ()
    reserves: tuple[Player, ...] = ()
    has_active_bench: bool = False
    tactical_offset: int = 0

    @property
    def roster(self) -> tuple[Player, ...]:
        """Combined roster (court + bench), the scope of number uniqueness."""
        return self.players + self.reserves

    @property
    def is_empty(self) -> bool:
        return not self.players and not self.reserves

    def total_skill(self) -> int:
        return sum(p.skill_level for p in self.players)

    def average_skill(self) -> float:
        if not self.players:
            return 0.0
        return self.total_skill() / len(self.players)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "logo": self.logo,
            "players": [p.to_dict() for p in self.players],
            "reserves": [p.to_dict() for p in self.reserves],
            "has_active_bench": self.has_active_bench,
            "tactical_offset": self.tactical_offset,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Team:
        return cls(
            id=d["id"],
            name=d["name"],
            color=d.get("color", "slate"),
            logo=d.get("logo"),
            players=tuple(Player.from_dict(p) for p in d.get("players", [])),
            reserves=tuple(Player.from_dict(p) for p in d.get("reserves", []) or []),
            has_active_bench=d.get("has_active_bench", False),
            tactical_offset=d.get("tactical_offset", 0),
        )


# ---------- Locations ----------
QUEUE_TARGET = "Queue"
RESERVES_SUFFIX = "_Reserves"


@dataclass(frozen=True)
class Location:
    """
    Address of one roster list: team_ref is "A", "B", a team id, or "Queue"
    (the tail of the waiting queue); bench selects the reserves list.
    String form matches the wire format: "A", "A_Reserves", "<id>_Reserves".
    """
    team_ref: str
    bench: bool = False

    @classmethod
    def parse(cls, raw: str) -> Location:
        if raw.endswith(RESERVES_SUFFIX):
            return cls(raw[: -len(RESERVES_SUFFIX)], bench=True)
        return cls(raw)

    @property
    def is_global_queue(self) -> bool:
        return self.team_ref == QUEUE_TARGET

    def __str__(self) -> str:
        return f"{self.team_ref}{RESERVES_SUFFIX}" if self.bench else self.team_ref


# ---------- Set history ----------
@dataclass(frozen=True)
class SetHistory:
    set_number: int
    score_a: int
    score_b: int
    winner: TeamSide

    def to_dict(self) -> dict[str, Any]:
        return {
            "set_number": self.set_number,
            "score_a": self.score_a,
            "score_b": self.score_b,
            "winner": self.winner.value,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SetHistory:
        return cls(d["set_number"], d["score_a"], d["score_b"], TeamSide(d["winner"]))


# ---------- Rotation report ----------
@dataclass(frozen=True)
class RotationReport:
    """
    Who goes out, who comes in, who was stolen from the queue.
    Informational only; never read back as engine input.
    """
    outgoing_team: Team
    incoming_team: Team
    retained_players: tuple[Player, ...] = ()
    stolen_players: tuple[Player, ...] = ()
    queue_after_rotation: tuple[Team, ...] = ()
    logs: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "outgoing_team": self.outgoing_team.to_dict(),
            "incoming_team": self.incoming_team.to_dict(),
            "retained_players": [p.to_dict() for p in self.retained_players],
            "stolen_players": [p.to_dict() for p in self.stolen_players],
            "queue_after_rotation": [t.to_dict() for t in self.queue_after_rotation],
            "logs": list(self.logs),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RotationReport:
        return cls(
            outgoing_team=Team.from_dict(d["outgoing_team"]),
            incoming_team=Team.from_dict(d["incoming_team"]),
            retained_players=tuple(Player.from_dict(p) for p in d.get("retained_players", [])),
            stolen_players=tuple(Player.from_dict(p) for p in d.get("stolen_players", [])),
            queue_after_rotation=tuple(Team.from_dict(t) for t in d.get("queue_after_rotation", [])),
            logs=tuple(d.get("logs", [])),
        )


# ---------- Deleted players ----------
@dataclass(frozen=True)
class DeletedPlayerRecord:
    """A permanently deleted player and where it came from, for one-shot undo."""
    player: Player
    origin: str  # Location string form
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {"player": self.player.to_dict(), "origin": self.origin, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DeletedPlayerRecord:
        return cls(Player.from_dict(d["player"]), d["origin"], d.get("timestamp", 0.0))


# ---------- Operation results ----------
class Reason(str, Enum):
    """Machine-readable rejection codes. Callers turn these into user messages."""
    NUMBER_CONFLICT = "number_conflict"
    ROSTER_FULL = "roster_full"
    BENCH_FULL = "bench_full"
    TEAM_NOT_FOUND = "team_not_found"
    PLAYER_NOT_FOUND = "player_not_found"
    DUPLICATE_PLAYER = "duplicate_player"
    MATCH_OVER = "match_over"
    MATCH_NOT_DECIDED = "match_not_decided"
    SCORE_LIMIT = "score_limit"
    SCORE_AT_ZERO = "score_at_zero"
    TIMEOUT_LIMIT = "timeout_limit"
    NOTHING_TO_UNDO = "nothing_to_undo"
    INVALID_INDEX = "invalid_index"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one dispatched action. Failures leave the state untouched."""
    ok: bool = True
    reason: Reason | None = None
    message: str | None = None
    conflict_id: str | None = None
    conflict_name: str | None = None
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def success(cls, **details: Any) -> ActionResult:
        return cls(ok=True, details=details)

    @classmethod
    def failure(
        cls,
        reason: Reason,
        message: str | None = None,
        conflict_id: str | None = None,
        conflict_name: str | None = None,
    ) -> ActionResult:
        return cls(
            ok=False,
            reason=reason,
            message=message,
            conflict_id=conflict_id,
            conflict_name=conflict_name,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"ok": self.ok}
        if self.reason is not None:
            d["reason"] = self.reason.value
        if self.message is not None:
            d["message"] = self.message
        if self.conflict_id is not None:
            d["conflict_id"] = self.conflict_id
            d["conflict_name"] = self.conflict_name
        if self.details:
            d["details"] = self.details
        return d
