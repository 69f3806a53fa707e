"""
GameState: the whole match as one immutable value.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field, replace

from courtside.config import GameConfig, RotationMode
from courtside.models import (
    DeletedPlayerRecord,
    RotationReport,
    SetHistory,
    Team,
    TeamSide,
)

from .lineup import Lineup, create_team, new_id
from .undo import LogEntry


@dataclass(frozen=True)
class GameState:
    game_id: str
    created_at: float
    team_a: Team
    team_b: Team
    queue: tuple[Team, ...] = ()
    config: GameConfig = field(default_factory=GameConfig)
    rotation_mode: RotationMode = RotationMode.STANDARD

    score_a: int = 0
    score_b: int = 0
    sets_a: int = 0
    sets_b: int = 0
    current_set: int = 1
    history: tuple[SetHistory, ...] = ()

    action_log: tuple[LogEntry, ...] = ()  # current set only
    match_log: tuple[LogEntry, ...] = ()
    last_snapshot: GameState | None = None
    last_scorer_team: TeamSide | None = None

    is_match_over: bool = False
    match_winner: TeamSide | None = None
    serving_team: TeamSide | None = None
    swapped_sides: bool = False
    pending_side_switch: bool = False
    timeouts_a: int = 0
    timeouts_b: int = 0
    in_sudden_death: bool = False
    match_duration_seconds: int = 0

    rotation_report: RotationReport | None = None
    deleted_player_history: tuple[DeletedPlayerRecord, ...] = ()

    # ---------- Accessors ----------
    @property
    def lineup(self) -> Lineup:
        return Lineup(self.team_a, self.team_b, self.queue)

    def with_lineup(self, lineup: Lineup) -> GameState:
        return replace(self, team_a=lineup.court_a, team_b=lineup.court_b, queue=lineup.queue)

    def team(self, side: TeamSide) -> Team:
        return self.team_a if side == TeamSide.A else self.team_b

    def with_team(self, side: TeamSide, team: Team) -> GameState:
        if side == TeamSide.A:
            return replace(self, team_a=team)
        return replace(self, team_b=team)

    def score(self, side: TeamSide) -> int:
        return self.score_a if side == TeamSide.A else self.score_b

    def timeouts(self, side: TeamSide) -> int:
        return self.timeouts_a if side == TeamSide.A else self.timeouts_b

    @property
    def court_limit(self) -> int:
        return self.config.court_limit

    @property
    def bench_limit(self) -> int:
        return self.config.bench_limit

    @property
    def target_points(self) -> int:
        return self.config.target_points(self.current_set)

    def can_undo(self) -> bool:
        return bool(self.action_log) or self.last_snapshot is not None


def initial_state(
    config: GameConfig | None = None,
    game_id: str | None = None,
    now: float | None = None,
    team_a_name: str = "Home",
    team_b_name: str = "Guest",
) -> GameState:
    return GameState(
        game_id=game_id or new_id(),
        created_at=time.time() if now is None else now,
        team_a=create_team(team_a_name, color="indigo"),
        team_b=create_team(team_b_name, color="rose"),
        config=config or GameConfig(),
    )
