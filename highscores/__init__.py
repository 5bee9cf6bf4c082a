"""
Highscores - a small leaderboard web service for game clients.

This package provides:
- Score submission over HTTP, keeping the best time per player identity
- An append-only history of every submission
- HTML and JSON leaderboard listings
"""

from .config import LeaderboardConfig
from .database import RecordStore
from .errors import LeaderboardError, SerializationError, StorageError, ValidationError
from .models import PlayerRecord, ScoreSubmission, SubmissionRecord
from .server import LeaderboardServer
from .web_handlers import WebHandlers

__version__ = "1.0.0"

__all__ = [
    "LeaderboardConfig",
    "RecordStore",
    "WebHandlers",
    "LeaderboardServer",
    "PlayerRecord",
    "SubmissionRecord",
    "ScoreSubmission",
    "LeaderboardError",
    "ValidationError",
    "StorageError",
    "SerializationError",
]
