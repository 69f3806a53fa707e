"""
Scorekeeping and rotation engine: pure state transitions over GameState.
"""
from .reducer import reduce, registered_actions
from .state import GameState, initial_state

__all__ = ["GameState", "initial_state", "reduce", "registered_actions"]
