"""In-memory queue feeding lookup jobs to the worker pool."""
from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from salesmap.orchestrator.jobs import LookupJob


class JobQueue:
    """Thin wrapper over `asyncio.Queue` that can be drained on abort."""

    def __init__(self, jobs: Iterable[LookupJob] = ()) -> None:
        self._queue: asyncio.Queue[LookupJob] = asyncio.Queue()
        for job in jobs:
            self._queue.put_nowait(job)

    def dequeue(self) -> Optional[LookupJob]:
        """Return the next job or None when the queue is exhausted."""
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def task_done(self) -> None:
        """Mark the current job as handled."""
        self._queue.task_done()

    def clear(self) -> int:
        """Drop every pending job, returning how many were discarded."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()
            dropped += 1
        return dropped
