"""
The closed set of actions accepted by reduce(). One frozen dataclass per kind.
Team references are "A", "B" or a team id; roster locations use the string
form of Location ("A", "A_Reserves", "<team id>_Reserves", "Queue").
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Union

from courtside.config import GameConfig, RotationMode
from courtside.models import Direction, Player, SkillType, Team, TeamSide
from courtside.profiles import PlayerProfile


# ---------- Scoring ----------
@dataclass(frozen=True)
class ScorePoint:
    team: TeamSide
    player_id: str | None = None
    skill: SkillType | None = None


@dataclass(frozen=True)
class SubtractPoint:
    team: TeamSide


@dataclass(frozen=True)
class RequestTimeout:
    team: TeamSide


@dataclass(frozen=True)
class SetServer:
    team: TeamSide | None


@dataclass(frozen=True)
class ToggleSides:
    pass


@dataclass(frozen=True)
class ManualRotation:
    team: TeamSide
    direction: Direction = Direction.CLOCKWISE


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class SetMatchDuration:
    seconds: int


# ---------- Match lifecycle ----------
@dataclass(frozen=True)
class ResetMatch:
    game_id: str | None = None


@dataclass(frozen=True)
class ApplySettings:
    config: GameConfig
    should_reset: bool = False


@dataclass(frozen=True)
class AdvanceToNextGame:
    game_id: str | None = None


@dataclass(frozen=True)
class SetRotationMode:
    mode: RotationMode


@dataclass(frozen=True)
class LoadState:
    state: Any  # GameState


# ---------- Roster ----------
@dataclass(frozen=True)
class AddPlayer:
    player: Player
    target: str = "A"


@dataclass(frozen=True)
class RemovePlayer:
    """Knockout to bench or queue."""
    player_id: str


@dataclass(frozen=True)
class DeletePlayer:
    player_id: str


@dataclass(frozen=True)
class UndoDeletePlayer:
    pass


@dataclass(frozen=True)
class CommitDeletions:
    pass


@dataclass(frozen=True)
class MovePlayer:
    player_id: str
    source: str
    dest: str
    index: int | None = None


@dataclass(frozen=True)
class SubstitutePlayer:
    team: str
    out_id: str
    in_id: str


@dataclass(frozen=True)
class SwapPositions:
    team: str
    index_a: int
    index_b: int


@dataclass(frozen=True)
class UpdatePlayer:
    player_id: str
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToggleFixed:
    player_id: str


@dataclass(frozen=True)
class ToggleBench:
    team: str


@dataclass(frozen=True)
class RenameTeam:
    team: str
    name: str


@dataclass(frozen=True)
class SetTeamColor:
    team: str
    color: str


@dataclass(frozen=True)
class SetTeamLogo:
    team: str
    logo: str | None


@dataclass(frozen=True)
class SortTeam:
    team: str
    criteria: str  # name | number | skill


@dataclass(frozen=True)
class ReorderQueue:
    from_index: int
    to_index: int


@dataclass(frozen=True)
class DisbandTeam:
    team_id: str


@dataclass(frozen=True)
class RestoreTeam:
    team: Team
    index: int


@dataclass(frozen=True)
class ResetRosters:
    pass


@dataclass(frozen=True)
class RebalanceTeams:
    pass


@dataclass(frozen=True)
class GenerateTeams:
    players: tuple[Player, ...]


@dataclass(frozen=True)
class SyncProfiles:
    profiles: tuple[PlayerProfile, ...]


@dataclass(frozen=True)
class UnlinkProfile:
    profile_id: str


ALL_ACTIONS: tuple[type, ...] = (
    ScorePoint,
    SubtractPoint,
    RequestTimeout,
    SetServer,
    ToggleSides,
    ManualRotation,
    Undo,
    SetMatchDuration,
    ResetMatch,
    ApplySettings,
    AdvanceToNextGame,
    SetRotationMode,
    LoadState,
    AddPlayer,
    RemovePlayer,
    DeletePlayer,
    UndoDeletePlayer,
    CommitDeletions,
    MovePlayer,
    SubstitutePlayer,
    SwapPositions,
    UpdatePlayer,
    ToggleFixed,
    ToggleBench,
    RenameTeam,
    SetTeamColor,
    SetTeamLogo,
    SortTeam,
    ReorderQueue,
    DisbandTeam,
    RestoreTeam,
    ResetRosters,
    RebalanceTeams,
    GenerateTeams,
    SyncProfiles,
    UnlinkProfile,
)

Action = Union[
    ScorePoint, SubtractPoint, RequestTimeout, SetServer, ToggleSides, ManualRotation, Undo,
    SetMatchDuration, ResetMatch, ApplySettings, AdvanceToNextGame, SetRotationMode, LoadState,
    AddPlayer, RemovePlayer, DeletePlayer, UndoDeletePlayer, CommitDeletions, MovePlayer,
    SubstitutePlayer, SwapPositions, UpdatePlayer, ToggleFixed, ToggleBench, RenameTeam,
    SetTeamColor, SetTeamLogo, SortTeam, ReorderQueue, DisbandTeam, RestoreTeam, ResetRosters,
    RebalanceTeams, GenerateTeams, SyncProfiles, UnlinkProfile,
]


# ---------- Wire form ----------
def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


ACTION_TYPES: dict[str, type] = {_snake(cls.__name__): cls for cls in ALL_ACTIONS if cls is not LoadState}

_SIDE_ACTIONS = (ScorePoint, SubtractPoint, RequestTimeout, SetServer, ManualRotation)

_FIELD_PARSERS: dict[str, Callable[[Any], Any]] = {
    "player": Player.from_dict,
    "players": lambda v: tuple(Player.from_dict(p) for p in v),
    "profiles": lambda v: tuple(PlayerProfile.from_dict(p) for p in v),
    "config": GameConfig.from_dict,
    "direction": Direction,
    "skill": lambda v: SkillType(v) if v else None,
    "mode": RotationMode,
}


def action_from_payload(kind: str, payload: dict[str, Any] | None = None) -> Action:
    """
    Build an action from its snake_case name and a JSON payload.
    Raises KeyError for an unknown kind, TypeError/ValueError for a bad payload.
    """
    cls = ACTION_TYPES[kind]
    known = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in (payload or {}).items():
        if key not in known:
            raise TypeError(f"{kind} has no field {key!r}")
        if key == "team" and cls in _SIDE_ACTIONS:
            value = TeamSide(value) if value else None
        elif key == "team" and cls is RestoreTeam:
            value = Team.from_dict(value)
        elif key in _FIELD_PARSERS:
            value = _FIELD_PARSERS[key](value)
        kwargs[key] = value
    return cls(**kwargs)
