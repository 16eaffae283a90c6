"""Concurrent resolution of customer records into map-ready records."""
from __future__ import annotations

import asyncio
import random
import uuid
from typing import Iterable, List, Optional, Protocol, Sequence

import structlog

from salesmap.geocode.client import LookupFailure
from salesmap.geocode.jitter import jitter
from salesmap.observability.metrics import MetricsRegistry, record_duration
from salesmap.observability.tracing import clear_context, set_context
from salesmap.orchestrator.jobs import LookupJob
from salesmap.orchestrator.queue import JobQueue
from salesmap.orchestrator.results import (
    LOOKUP_FAILURE,
    SUPERSEDED,
    ResolutionErr,
    ResolutionOk,
    ResolutionResult,
)
from salesmap.orchestrator.session_state import SessionState
from salesmap.storage.models import CustomerRecord, GeoPoint, ResolvedRecord

LOGGER = structlog.get_logger(__name__)

DEFAULT_MAX_CONCURRENCY = 8


class Geocoder(Protocol):
    async def resolve(self, city: str) -> Optional[GeoPoint]:
        ...


def sort_by_year(records: Iterable[ResolvedRecord]) -> List[ResolvedRecord]:
    """Stable ascending sort by year; records without a year go last."""
    return sorted(records, key=lambda record: (record.year is None, record.year or 0))


class ResolutionOrchestrator:
    """Drives a bounded pool of lookup workers over one batch of records."""

    def __init__(
        self,
        geocoder: Geocoder,
        session: SessionState,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        metrics: Optional[MetricsRegistry] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._geocoder = geocoder
        self._session = session
        self._max_concurrency = max_concurrency
        self._metrics = metrics or MetricsRegistry()
        self._rng = rng

    async def _worker(self, *, queue: JobQueue, generation: int, failures: List[LookupFailure]) -> None:
        while not failures and self._session.is_current(generation):
            job = queue.dequeue()
            if job is None:
                return
            job.mark_started()
            self._metrics.incr("lookups_total")
            try:
                location = await self._geocoder.resolve(job.city)
            except LookupFailure as exc:
                job.mark_failed(exc)
                self._metrics.incr("lookup_failures")
                failures.append(exc)
                return
            finally:
                queue.task_done()
            job.mark_succeeded(jitter(location, self._rng) if location is not None else None)
            self._metrics.incr("lookups_matched" if location is not None else "lookups_empty")
            self._session.progress.advance(generation)

    async def resolve_all(self, records: Sequence[CustomerRecord]) -> ResolutionResult:
        """Geocode every record and return them sorted by year, or an error.

        The result is all-or-nothing: one `LookupFailure` stops the remaining
        workers and no partial list is produced.
        """
        records = list(records)
        generation = self._session.begin_run(len(records))
        run_id = uuid.uuid4().hex[:12]
        jobs = [LookupJob(index=index, record=record) for index, record in enumerate(records)]
        queue = JobQueue(jobs)
        failures: List[LookupFailure] = []

        set_context(run_id=run_id, generation=generation)
        try:
            LOGGER.info("run_started", total=len(jobs), max_concurrency=self._max_concurrency)
            with record_duration(self._metrics, "run_duration_ms"):
                workers = [
                    asyncio.create_task(self._worker(queue=queue, generation=generation, failures=failures))
                    for _ in range(min(self._max_concurrency, len(jobs)))
                ]
                try:
                    await asyncio.gather(*workers)
                except BaseException:
                    for worker in workers:
                        worker.cancel()
                    await asyncio.gather(*workers, return_exceptions=True)
                    queue.clear()
                    LOGGER.exception("run_aborted")
                    raise

            if failures:
                dropped = queue.clear()
                LOGGER.error("run_failed", city=failures[0].city, reason=failures[0].reason, dropped=dropped)
                return ResolutionErr(kind=LOOKUP_FAILURE, generation=generation, error=failures[0])
            if not self._session.is_current(generation):
                queue.clear()
                self._metrics.incr("runs_superseded")
                LOGGER.info("run_superseded", current=self._session.generation)
                return ResolutionErr(kind=SUPERSEDED, generation=generation)

            resolved = sort_by_year(ResolvedRecord.from_customer(job.record, job.location) for job in jobs)
            LOGGER.info(
                "run_finished",
                total=len(resolved),
                located=sum(1 for record in resolved if record.has_location),
            )
            return ResolutionOk(records=tuple(resolved), generation=generation)
        finally:
            clear_context()


async def ingest(
    records: Sequence[CustomerRecord],
    *,
    session: SessionState,
    geocoder: Geocoder,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    metrics: Optional[MetricsRegistry] = None,
    rng: Optional[random.Random] = None,
) -> ResolutionResult:
    """Resolve ``records`` and commit the outcome into ``session``."""
    orchestrator = ResolutionOrchestrator(
        geocoder,
        session,
        max_concurrency=max_concurrency,
        metrics=metrics,
        rng=rng,
    )
    result = await orchestrator.resolve_all(records)
    session.commit(result)
    return result
