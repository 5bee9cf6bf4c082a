"""
Error types raised by the leaderboard service.
"""

from typing import Dict, Optional


class LeaderboardError(Exception):
    """Base class for all leaderboard errors."""


class ValidationError(LeaderboardError):
    """
    A score submission body was malformed or missing required fields.

    @param errors: Mapping of field name to a human readable message
    @param status: HTTP status to answer with (400 undecodable, 422 invalid)
    """

    def __init__(
        self,
        errors: Dict[str, str],
        status: int = 422,
    ) -> None:
        self.errors = errors
        self.status = status
        super().__init__(
            ", ".join(f"{field}: {msg}" for field, msg in errors.items())
        )


class StorageError(LeaderboardError):
    """A read or write against the record store failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
    ) -> None:
        self.operation = operation
        super().__init__(message)


class SerializationError(LeaderboardError):
    """Records could not be rendered as JSON or HTML."""
