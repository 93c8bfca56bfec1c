"""Exceptions raised by the Football Recorder package."""

from typing import Optional


class FootballRecorderError(RuntimeError):
    """Base error for the football recorder package."""


class MalformedRecordError(FootballRecorderError):
    """A persisted player or match record cannot be decoded."""

    def __init__(self, message: str, *, record: Optional[object] = None):
        super().__init__(message)
        self.record = record


class MalformedEventError(MalformedRecordError):
    """A match event lacks a known ``type`` discriminator or required fields."""


class InvalidSortError(FootballRecorderError, ValueError):
    """A leaderboard was requested with an unknown metric or direction."""


class RecordNotFoundError(FootballRecorderError):
    """A requested player or match does not exist."""
