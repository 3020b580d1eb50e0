"""Core framework components for Popcorn Catcher."""

from .state import SessionPhase, StateMachine
from .events import EventBus, Event, EventType

__all__ = ["SessionPhase", "StateMachine", "EventBus", "Event", "EventType"]
