"""Frame clock: turns wall-clock frame timestamps into simulation time."""

import logging

logger = logging.getLogger(__name__)

# Physics constants are tuned for one frame at 60 Hz
NOMINAL_FRAME_MS = 16.67

# Longest frame simulated in one step (tab suspend, slow frames)
MAX_FRAME_MS = 40.0


class SimulationClock:
    """Tracks session start and the previous frame timestamp.

    All timestamps are milliseconds on the same monotonic clock.
    """

    def __init__(
        self,
        max_frame_ms: float = MAX_FRAME_MS,
        nominal_frame_ms: float = NOMINAL_FRAME_MS,
    ) -> None:
        self.max_frame_ms = max_frame_ms
        self.nominal_frame_ms = nominal_frame_ms
        self.started_at = 0.0
        self.last_ts = 0.0

    def start(self, now_ms: float) -> None:
        """Reset the clock for a new session starting at ``now_ms``."""
        self.started_at = now_ms
        self.last_ts = now_ms

    def advance(self, now_ms: float) -> float:
        """Consume one frame and return its clamped delta in ms."""
        delta = now_ms - self.last_ts
        self.last_ts = now_ms
        if delta > self.max_frame_ms:
            logger.debug(f"Long frame clamped: {delta:.1f}ms")
        return min(self.max_frame_ms, max(0.0, delta))

    def elapsed_seconds(self, now_ms: float) -> float:
        """Seconds since session start, never negative."""
        return max(0.0, (now_ms - self.started_at) / 1000.0)

    def frame_factor(self, delta_ms: float) -> float:
        """Ratio of a frame delta to the nominal frame period."""
        return delta_ms / self.nominal_frame_ms
