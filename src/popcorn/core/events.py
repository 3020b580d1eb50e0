"""
Event bus for Popcorn Catcher.

Carries the game's output surface (score changes, catches, session
end, leaderboard save outcome) from the simulation to the window.
Handlers run synchronously inside ``emit``, so a frame tick never
waits on them.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events produced by a game session."""
    SESSION_STARTED = auto()
    SESSION_ENDED = auto()
    SCORE_CHANGED = auto()
    OBJECT_CAUGHT = auto()

    # Outcome of the background leaderboard submission
    SCORE_SAVED = auto()
    SCORE_SAVE_FAILED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: What happened
        data: Event payload
        source: Component that emitted the event
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "session"


Handler = Callable[[Event], None]


class EventBus:
    """Fans session events out to subscribed callbacks."""

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Call ``handler`` for every event of ``event_type``.

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Call ``handler`` for every event. Returns an unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver ``event``; a failing handler is logged and the rest still run."""
        for handler in self._handlers.get(event.type, []) + self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in {event.type.name} handler: {e}")
