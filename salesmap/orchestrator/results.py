"""Outcome types of a resolution run."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from salesmap.storage.models import ResolvedRecord

LOOKUP_FAILURE = "lookup_failure"
SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ResolutionOk:
    records: Tuple[ResolvedRecord, ...]
    generation: int


@dataclass(frozen=True)
class ResolutionErr:
    kind: str
    generation: int
    error: Optional[Exception] = None


ResolutionResult = Union[ResolutionOk, ResolutionErr]
