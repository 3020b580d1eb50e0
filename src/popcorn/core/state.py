"""
State machine for a play-through.

States:
    IDLE: No session has been played yet, or the last one was abandoned
    RUNNING: Frames are being simulated
    ENDED: A falling object reached the floor; the final score is fixed
"""

from enum import Enum, auto
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    """Session lifecycle phases."""
    IDLE = auto()
    RUNNING = auto()
    ENDED = auto()


@dataclass
class SessionContext:
    """Context data carried across phases."""
    player_name: str = ""
    skin: str = ""
    final_score: int | None = None


class StateMachine:
    """
    Manages the session phase and its transitions.

    RUNNING -> ENDED is only taken on floor contact. ENDED is left only
    by starting a new session, which goes straight back to RUNNING.
    """

    VALID_TRANSITIONS: list[tuple[SessionPhase, SessionPhase]] = [
        (SessionPhase.IDLE, SessionPhase.RUNNING),
        (SessionPhase.RUNNING, SessionPhase.ENDED),
        (SessionPhase.RUNNING, SessionPhase.RUNNING),  # Restart mid-play
        (SessionPhase.RUNNING, SessionPhase.IDLE),     # Abandoned from a menu
        (SessionPhase.ENDED, SessionPhase.RUNNING),    # Replay
    ]

    def __init__(self, initial_phase: SessionPhase = SessionPhase.IDLE) -> None:
        self._phase = initial_phase
        self._context = SessionContext()
        self._valid_transitions = set(self.VALID_TRANSITIONS)

    @property
    def phase(self) -> SessionPhase:
        """Get current phase."""
        return self._phase

    @property
    def context(self) -> SessionContext:
        """Get current context."""
        return self._context

    def can_transition(self, to_phase: SessionPhase) -> bool:
        """Check if transition to given phase is valid."""
        return (self._phase, to_phase) in self._valid_transitions

    def transition(self, to_phase: SessionPhase, **context_updates) -> bool:
        """
        Attempt to transition to a new phase.

        Args:
            to_phase: Target phase
            **context_updates: Updates to apply to context

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_phase):
            logger.warning(
                f"Invalid transition: {self._phase.name} -> {to_phase.name}"
            )
            return False

        old_phase = self._phase
        self._phase = to_phase

        for key, value in context_updates.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

        logger.debug(f"Session transition: {old_phase.name} -> {to_phase.name}")

        return True

