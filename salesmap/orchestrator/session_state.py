"""Session-wide owner of the resolved record set."""
from __future__ import annotations

from typing import Tuple

import structlog

from salesmap.orchestrator.progress import ProgressCell
from salesmap.orchestrator.results import ResolutionOk, ResolutionResult
from salesmap.storage.models import ResolvedRecord

LOGGER = structlog.get_logger(__name__)


class SessionState:
    """Holds the authoritative resolved set and the current run generation.

    Only the most recently started run may publish progress or replace the
    resolved set; a failed run leaves the previous set in place.
    """

    def __init__(self) -> None:
        self._resolved: Tuple[ResolvedRecord, ...] = ()
        self._generation = 0
        self.progress = ProgressCell()

    @property
    def resolved(self) -> Tuple[ResolvedRecord, ...]:
        return self._resolved

    @property
    def generation(self) -> int:
        return self._generation

    def begin_run(self, total: int) -> int:
        """Start a new generation and reset progress to zero of ``total``."""
        self._generation += 1
        self.progress.reset(self._generation, total)
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def commit(self, result: ResolutionResult) -> bool:
        """Replace the resolved set with a successful, current result."""
        if not isinstance(result, ResolutionOk):
            LOGGER.info("commit_skipped", generation=result.generation, kind=result.kind)
            return False
        if not self.is_current(result.generation):
            LOGGER.info("commit_stale", generation=result.generation, current=self._generation)
            return False
        self._resolved = tuple(result.records)
        return True

    def clear(self) -> None:
        self._resolved = ()
