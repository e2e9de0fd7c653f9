"""Exceptions raised by the fund tracker domain."""
from __future__ import annotations

from datetime import date


class FundTrackerError(Exception):
    """Base class for recoverable fund tracker failures."""


class InvalidSnapshotError(FundTrackerError, ValueError):
    """A snapshot was constructed with a negative core figure."""


class InvalidEventError(FundTrackerError, ValueError):
    """A cash event was rejected at entry."""


class IntervalOrderError(FundTrackerError, ValueError):
    """An interval breakdown was requested for snapshots out of order."""

    def __init__(self, previous_date: date, current_date: date) -> None:
        super().__init__(
            f"Previous snapshot ({previous_date.isoformat()}) must be dated before "
            f"current snapshot ({current_date.isoformat()})"
        )
        self.previous_date = previous_date
        self.current_date = current_date


class StateFileError(FundTrackerError):
    """A persisted or imported state document is malformed."""
