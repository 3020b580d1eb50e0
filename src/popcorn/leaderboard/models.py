"""Leaderboard records and the shared document they live in."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Jugador"


@dataclass(frozen=True)
class ScoreEntry:
    """One finished session. Names are not unique."""
    name: str
    score: int
    ts: Optional[int] = None  # epoch milliseconds

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ScoreEntry":
        """Parse a stored entry, tolerating values written by older clients."""
        try:
            score = int(data.get("score") or 0)
        except (TypeError, ValueError):
            score = 0
        try:
            ts = int(data["ts"]) if data.get("ts") is not None else None
        except (TypeError, ValueError):
            ts = None
        return cls(name=str(data.get("name") or ""), score=score, ts=ts)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "score": self.score}
        if self.ts is not None:
            payload["ts"] = self.ts
        return payload

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_NAME


@dataclass
class LeaderboardDocument:
    """The whole remote payload: ``{"scores": [...]}``, oldest first."""
    scores: List[ScoreEntry] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Any) -> "LeaderboardDocument":
        """Build a document from whatever the store returned.

        A missing or malformed ``scores`` field reads as an empty board.
        """
        raw = data.get("scores") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            if data:
                logger.warning("Leaderboard document has no scores list, treating as empty")
            return cls()
        return cls(scores=[ScoreEntry.from_payload(item) for item in raw if isinstance(item, dict)])

    def to_payload(self) -> Dict[str, Any]:
        return {"scores": [entry.to_payload() for entry in self.scores]}

    def contains(self, name: str, score: int) -> bool:
        """Check for an entry matching both name and score exactly."""
        return any(entry.name == name and entry.score == score for entry in self.scores)

    def with_entry(self, entry: ScoreEntry, cap: int) -> "LeaderboardDocument":
        """Copy with ``entry`` appended and the oldest entries beyond ``cap`` evicted."""
        scores = list(self.scores)
        scores.append(entry)
        if len(scores) > cap:
            scores = scores[len(scores) - cap:]
        return LeaderboardDocument(scores=scores)

    def ranked(self, limit: int = 50) -> List[ScoreEntry]:
        """Best scores first; ties go to the earlier timestamp."""
        ordered = sorted(self.scores, key=lambda entry: (-entry.score, entry.ts or 0))
        return ordered[:limit]
