"""One play-through: spawning, physics, scoring and the hand-off to the leaderboard.

``tick`` is called once per display refresh with the frame timestamp.
It never awaits. When a falling object reaches the floor the session
stops itself first and only then starts the leaderboard submission as
a background task, so the network protocol never sees live simulation
state. A later session does not cancel that task.
"""

import asyncio
import logging
import random
from typing import List, Optional, Set

from popcorn.core.events import Event, EventBus, EventType
from popcorn.core.state import SessionPhase, StateMachine
from popcorn.game.clock import SimulationClock
from popcorn.game.models import Catcher, FallingObject, PlayField, SessionState
from popcorn.game.physics import PhysicsWorld
from popcorn.game.spawner import SpawnScheduler
from popcorn.leaderboard.sync import LeaderboardSync, SubmitOutcome
from popcorn.utils.profile import PlayerProfile

logger = logging.getLogger(__name__)


class GameSession:
    """Orchestrates the per-frame simulation and the session lifecycle."""

    def __init__(
        self,
        play_field: PlayField,
        event_bus: Optional[EventBus] = None,
        leaderboard: Optional[LeaderboardSync] = None,
        state_machine: Optional[StateMachine] = None,
        rng: Optional[random.Random] = None,
    ):
        self.field = play_field
        self.event_bus = event_bus or EventBus()
        self.leaderboard = leaderboard
        self.state_machine = state_machine or StateMachine()

        self.clock = SimulationClock()
        self.spawner = SpawnScheduler(play_field, rng=rng)
        self.world = PhysicsWorld(play_field, on_catch=self._on_catch)
        self.state = SessionState()

        # Increases with every start; ties save outcomes to their session
        self.session_id = 0
        self.last_submission: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    @property
    def phase(self) -> SessionPhase:
        return self.state_machine.phase

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def objects(self) -> List[FallingObject]:
        return self.world.objects

    @property
    def catcher(self) -> Catcher:
        return self.world.catcher

    # Lifecycle

    def start(self, profile: PlayerProfile, now_ms: float) -> None:
        """Begin a new play-through at frame time ``now_ms``.

        Raises ValidationError without touching any state if the
        profile is incomplete. A session that is still running is
        replaced.
        """
        profile.validate()
        profile = profile.cleaned()
        self.session_id += 1

        if self.state.running:
            logger.info("Restarting while a session is running")

        self.state = SessionState(
            player_name=profile.name,
            skin=profile.skin,
            running=True,
            started_at=now_ms,
        )
        self.clock.start(now_ms)
        self.world.reset()
        self.spawner.reset(now_ms)

        self.state_machine.transition(
            SessionPhase.RUNNING,
            player_name=profile.name,
            skin=profile.skin,
            final_score=None,
        )
        logger.info(f"Session started for {profile.name!r}")

        self._emit(EventType.SESSION_STARTED, {
            "name": profile.name,
            "skin": profile.skin,
            "session": self.session_id,
        })
        self._emit(EventType.SCORE_CHANGED, {"score": 0})

    def stop(self) -> None:
        """Abandon the running session without ending it (no score is submitted)."""
        if not self.state.running:
            return
        self.state.running = False
        self.state_machine.transition(SessionPhase.IDLE)
        logger.info("Session abandoned")

    def tick(self, now_ms: float) -> None:
        """Simulate one frame."""
        if not self.state.running:
            return

        delta_ms = self.clock.advance(now_ms)
        elapsed = self.clock.elapsed_seconds(now_ms)

        spawned = self.spawner.maybe_spawn(now_ms)
        if spawned is not None:
            self.world.add(spawned)

        result = self.world.step(self.clock.frame_factor(delta_ms), elapsed)

        if result.caught:
            self.state.score += len(result.caught)
            self._emit(EventType.SCORE_CHANGED, {"score": self.state.score})

        if result.ended:
            self._end()

    def _end(self) -> None:
        self.state.running = False
        name, score = self.state.player_name, self.state.score
        ended = {"name": name, "score": score, "session": self.session_id}

        self.state_machine.transition(SessionPhase.ENDED, final_score=score)
        logger.info(f"Session ended for {name!r} with score {score}")
        self._emit(EventType.SESSION_ENDED, dict(ended))

        if self.leaderboard is not None:
            self.last_submission = self._schedule_submission(ended)

    # Input

    def press(self, x: float) -> None:
        self.world.press(x)

    def drag(self, x: float) -> None:
        self.world.drag(x)

    def release(self) -> None:
        self.world.release()

    # Leaderboard hand-off

    def _schedule_submission(self, ended: dict) -> Optional[asyncio.Task]:
        """Start submitting ``ended`` (the SESSION_ENDED payload) in the background."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("No running event loop, score was not submitted")
            self._emit(EventType.SCORE_SAVE_FAILED, dict(ended))
            return None

        task = loop.create_task(self._submit(ended))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _submit(self, ended: dict) -> SubmitOutcome:
        outcome = await self.leaderboard.submit(ended["name"], ended["score"])
        event_type = EventType.SCORE_SAVED if outcome.ok else EventType.SCORE_SAVE_FAILED
        self._emit(event_type, dict(ended))
        return outcome

    async def wait_for_submissions(self) -> None:
        """Let background submissions finish (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # Events

    def _on_catch(self, obj: FallingObject, catcher: Catcher) -> None:
        self._emit(EventType.OBJECT_CAUGHT, {"x": obj.x, "y": catcher.y})

    def _emit(self, event_type: EventType, data: dict) -> None:
        self.event_bus.emit(Event(event_type, data=data, source="session"))
