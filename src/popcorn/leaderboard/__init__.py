"""Shared online leaderboard."""

from .models import LeaderboardDocument, ScoreEntry
from .store import DocumentStore, InMemoryStore, JsonBinStore
from .sync import LeaderboardSync, SubmitOutcome

__all__ = [
    "LeaderboardDocument",
    "ScoreEntry",
    "DocumentStore",
    "InMemoryStore",
    "JsonBinStore",
    "LeaderboardSync",
    "SubmitOutcome",
]
