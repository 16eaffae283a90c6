"""Tracing helpers for lookup and run stages."""
from __future__ import annotations

import contextlib
import time
from typing import Iterator, Optional

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars


def _logger():
    return structlog.get_logger("salesmap.trace")


def set_context(*, run_id: str, generation: int) -> None:
    bind_contextvars(run_id=run_id, generation=generation)
    _logger().debug("trace_context", run_id=run_id, generation=generation)


def clear_context() -> None:
    unbind_contextvars("run_id", "generation")


@contextlib.contextmanager
def span(*, name: str, city: Optional[str] = None) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        _logger().debug("trace_span", span=name, city=city, elapsed_ms=elapsed_ms)


def log_lookup_result(*, city: str, status: int, matched: bool, elapsed_ms: int) -> None:
    _logger().info(
        "lookup_result",
        city=city,
        status=status,
        matched=matched,
        elapsed_ms=elapsed_ms,
    )


def log_lookup_failure(*, city: str, reason: str) -> None:
    _logger().warning("lookup_failure", city=city, reason=reason)
