"""Typed records flowing through the resolution pipeline."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

UNKNOWN_YEAR_KEY = "unknown"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Represents a resolved coordinate pair."""

    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class CustomerRecord:
    """One customer sale extracted from a spreadsheet row."""

    city: str
    year: Optional[int]
    name: str
    device: str

    @property
    def year_key(self) -> str:
        """Grouping key used by colours and filters."""
        return str(self.year) if self.year is not None else UNKNOWN_YEAR_KEY

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ResolvedRecord(CustomerRecord):
    """A customer record together with its geocoded location, if any."""

    location: Optional[GeoPoint] = None

    @classmethod
    def from_customer(cls, record: CustomerRecord, location: Optional[GeoPoint]) -> "ResolvedRecord":
        return cls(
            city=record.city,
            year=record.year,
            name=record.name,
            device=record.device,
            location=location,
        )

    @property
    def has_location(self) -> bool:
        return self.location is not None
