"""Leaderboard synchronization over a non-transactional document store.

Every submission is a read-merge-write cycle followed by a verification
read. Concurrent clients can overwrite each other between our write and
our verification (last writer wins), so a missing entry on verification
restarts the whole cycle. Attempts are sequential and bounded; the
caller only ever sees SAVED or FAILED.

The result is verified at-least-once delivery: if a write lands but the
verification read fails, the retry appends a second copy of the entry.
"""

import asyncio
import logging
import random
import time
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from popcorn.config.settings import LeaderboardSettings
from popcorn.errors import RaceLost, StoreUnavailable
from popcorn.leaderboard.models import LeaderboardDocument, ScoreEntry
from popcorn.leaderboard.store import DocumentStore

logger = logging.getLogger(__name__)


class SubmitOutcome(Enum):
    """What the player is told after a score submission."""
    SAVED = "saved"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is SubmitOutcome.SAVED


Sleep = Callable[[float], Awaitable[None]]


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class LeaderboardSync:
    """Owns the retry/merge/verify protocol for the shared leaderboard."""

    def __init__(
        self,
        store: DocumentStore,
        max_attempts: int = 5,
        jitter_ms: float = 250.0,
        read_backoff_ms: float = 200.0,
        write_backoff_ms: float = 250.0,
        verify_backoff_ms: float = 300.0,
        retention_cap: int = 1000,
        ranked_limit: int = 50,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = _epoch_ms,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.jitter_ms = jitter_ms
        self.read_backoff_ms = read_backoff_ms
        self.write_backoff_ms = write_backoff_ms
        self.verify_backoff_ms = verify_backoff_ms
        self.retention_cap = retention_cap
        self.ranked_limit = ranked_limit

        self._sleep = sleep
        self._rng = rng or random.Random()
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        store: DocumentStore,
        settings: LeaderboardSettings,
        **kwargs,
    ) -> "LeaderboardSync":
        return cls(
            store,
            max_attempts=settings.max_attempts,
            jitter_ms=settings.jitter_ms,
            read_backoff_ms=settings.read_backoff_ms,
            write_backoff_ms=settings.write_backoff_ms,
            verify_backoff_ms=settings.verify_backoff_ms,
            retention_cap=settings.retention_cap,
            ranked_limit=settings.ranked_limit,
            **kwargs,
        )

    async def submit(self, name: str, score: int) -> SubmitOutcome:
        """Append ``(name, score)`` to the shared leaderboard.

        Returns SAVED once an entry with this name and score has been
        read back from the store, FAILED otherwise.
        """
        try:
            await self._submit_with_retries(name, score)
        except RaceLost as e:
            logger.error(f"Score for {name!r} could not be confirmed: {e}")
            return SubmitOutcome.FAILED
        except StoreUnavailable as e:
            logger.error(f"Score for {name!r} could not be saved: {e}")
            return SubmitOutcome.FAILED

        logger.info(f"Score saved: {name!r} = {score}")
        return SubmitOutcome.SAVED

    async def _submit_with_retries(self, name: str, score: int) -> None:
        # Spread out clients that finish a session at the same moment
        await self._sleep(self._rng.random() * self.jitter_ms / 1000.0)

        attempt = 0
        while attempt < self.max_attempts:
            attempt += 1
            last = attempt == self.max_attempts

            try:
                current = LeaderboardDocument.from_payload(await self.store.read())
            except StoreUnavailable:
                if last:
                    raise
                logger.warning(f"Leaderboard read failed, attempt {attempt}")
                await self._backoff(self.read_backoff_ms, attempt)
                continue

            entry = ScoreEntry(name=name, score=score, ts=self._clock())
            merged = current.with_entry(entry, self.retention_cap)

            try:
                await self.store.write(merged.to_payload())
            except StoreUnavailable:
                if last:
                    raise
                logger.warning(f"Leaderboard write failed, attempt {attempt}")
                await self._backoff(self.write_backoff_ms, attempt)
                continue

            try:
                verified = LeaderboardDocument.from_payload(await self.store.read())
            except StoreUnavailable:
                if last:
                    raise
                logger.warning(f"Leaderboard verification read failed, attempt {attempt}")
                await self._backoff(self.verify_backoff_ms, attempt)
                continue

            if verified.contains(name, score):
                return

            if last:
                raise RaceLost(f"entry not found after {attempt} attempts")
            logger.warning(f"Leaderboard write was overwritten, attempt {attempt}")
            await self._backoff(self.verify_backoff_ms, attempt)

    async def _backoff(self, base_ms: float, attempt: int) -> None:
        await self._sleep(base_ms * attempt / 1000.0)

    async def load_ranked(self) -> List[ScoreEntry]:
        """Read the board once for display. Raises StoreUnavailable."""
        document = LeaderboardDocument.from_payload(await self.store.read())
        return document.ranked(self.ranked_limit)
