"""
Persistence layer for saved matches and profiles.
No game logic: only read/write interfaces.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import MatchRepository, ProfileRepository
from .snapshots import state_from_dict, state_to_dict

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "MatchRepository",
    "ProfileRepository",
    "state_from_dict",
    "state_to_dict",
]
