"""
Service layer: stateful wrappers around the pure engine.
"""
from .match_session import MatchSession

__all__ = ["MatchSession"]
