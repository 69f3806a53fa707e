"""
MatchSession: owns one GameState and a ProfileStore.
Profile lookups and write-backs happen here; every state change still goes
through reduce().
"""
from __future__ import annotations

import logging
import time
from typing import Iterable

from courtside.config import GameConfig
from courtside.engine import actions as a
from courtside.engine.lineup import create_player
from courtside.engine.reducer import reduce
from courtside.engine.roster import next_original_index
from courtside.engine.state import GameState, initial_state
from courtside.engine.team_generator import build_players
from courtside.models import ActionResult, Reason, Team
from courtside.profiles import PlayerProfile, ProfileStore, new_profile

logger = logging.getLogger(__name__)


class MatchSession:
    def __init__(
        self,
        state: GameState | None = None,
        profiles: ProfileStore | None = None,
        config: GameConfig | None = None,
    ) -> None:
        self.state = state or initial_state(config)
        self.profiles = profiles or ProfileStore()
        self._disbanded: list[tuple[Team, int]] = []

    def dispatch(self, action: object, now: float | None = None) -> ActionResult:
        self.state, result = reduce(self.state, action, now)
        return result

    # ---------- Roster helpers ----------
    def add_player(
        self,
        name: str,
        target: str = "A",
        number: str | None = None,
        skill_level: int | None = None,
        profile_id: str | None = None,
    ) -> ActionResult:
        """
        Add a new player. A profile (by id, else by exact name) supplies the
        skill and number the caller leaves out.
        """
        profile = self.profiles.get(profile_id) if profile_id else self.profiles.find_by_name(name)
        if profile is not None:
            skill_level = profile.skill_level if skill_level is None else skill_level
            number = profile.number if number is None else number
        player = create_player(
            name,
            next_original_index(self.state.lineup),
            profile_id=profile.id if profile else None,
            skill_level=5 if skill_level is None else skill_level,
            number=number,
        )
        result = self.dispatch(a.AddPlayer(player, target))
        if result.ok:
            result.details.setdefault("player_id", player.id)
        return result

    def generate_teams(self, lines: str | Iterable[str]) -> ActionResult:
        if isinstance(lines, str):
            lines = lines.splitlines()
        players = build_players(lines, 0, self.profiles.find_by_name)
        logger.info("generating teams from %d players", len(players))
        return self.dispatch(a.GenerateTeams(tuple(players)))

    def disband_team(self, team_id: str) -> ActionResult:
        result = self.dispatch(a.DisbandTeam(team_id))
        if result.ok:
            self._disbanded.append((Team.from_dict(result.details["team"]), result.details["index"]))
        return result

    def restore_last_disbanded(self) -> ActionResult:
        if not self._disbanded:
            return ActionResult.failure(Reason.NOTHING_TO_UNDO)
        team, index = self._disbanded.pop()
        return self.dispatch(a.RestoreTeam(team, index))

    # ---------- Profiles ----------
    def save_player_to_profile(self, player_id: str) -> PlayerProfile | None:
        """Create or refresh the profile behind a player and link them."""
        player = self.state.lineup.find_player(player_id)
        if player is None:
            return None
        profile = self.profiles.get(player.profile_id) if player.profile_id else None
        if profile is None:
            profile = new_profile(player.name, player.skill_level, player.number, player.role)
        else:
            profile.name = player.name
            profile.skill_level = player.skill_level
            profile.number = player.number
            profile.role = player.role
            profile.updated_at = time.time()
        self.profiles.upsert(profile)
        if player.profile_id != profile.id:
            self.dispatch(a.UpdatePlayer(player_id, {"profile_id": profile.id}))
        return profile

    def upsert_profile(self, profile: PlayerProfile) -> ActionResult:
        """Store a profile and push its fields onto linked players."""
        self.profiles.upsert(profile)
        return self.dispatch(a.SyncProfiles(tuple(self.profiles.all())))

    def delete_profile(self, profile_id: str) -> bool:
        if not self.profiles.delete(profile_id):
            return False
        self.dispatch(a.UnlinkProfile(profile_id))
        return True
