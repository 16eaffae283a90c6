"""Definitions for lookup jobs and their lifecycle."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from salesmap.storage.models import CustomerRecord, GeoPoint


@dataclass
class LookupJob:
    """Represents one queued geocoding lookup for a customer record."""

    index: int
    record: CustomerRecord
    status: str = "pending"
    location: Optional[GeoPoint] = None
    last_error: Optional[str] = None

    @property
    def city(self) -> str:
        return self.record.city

    def mark_started(self) -> None:
        """Transition the job into the in-progress state."""
        self.status = "in_progress"

    def mark_succeeded(self, location: Optional[GeoPoint]) -> None:
        """Record the lookup outcome; None means the service had no match."""
        self.location = location
        self.status = "matched" if location is not None else "empty"

    def mark_failed(self, error: Exception) -> None:
        """Record a failure and capture the error message."""
        self.status = "failed"
        self.last_error = str(error)
