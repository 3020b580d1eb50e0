"""Popcorn Catcher simulation."""

from .clock import SimulationClock
from .models import Catcher, FallingObject, PlayField, SessionState
from .physics import PhysicsWorld, StepResult
from .session import GameSession
from .spawner import SpawnScheduler

__all__ = [
    "SimulationClock",
    "Catcher",
    "FallingObject",
    "PlayField",
    "SessionState",
    "PhysicsWorld",
    "StepResult",
    "GameSession",
    "SpawnScheduler",
]
