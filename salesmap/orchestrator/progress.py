"""Observable progress cell shared between a resolution run and its observers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

Observer = Callable[["Progress"], None]


@dataclass(frozen=True)
class Progress:
    """Point-in-time view of a run's counters."""

    generation: int
    processed: int
    total: int

    @property
    def done(self) -> bool:
        return self.total > 0 and self.processed >= self.total


class ProgressCell:
    """Single-writer cell; writes from a stale generation are ignored."""

    def __init__(self) -> None:
        self._value = Progress(generation=0, processed=0, total=0)
        self._observers: List[Observer] = []

    def snapshot(self) -> Progress:
        return self._value

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def reset(self, generation: int, total: int) -> bool:
        if generation < self._value.generation:
            return False
        self._publish(Progress(generation=generation, processed=0, total=total))
        return True

    def advance(self, generation: int) -> bool:
        current = self._value
        if generation != current.generation:
            return False
        self._publish(Progress(generation=generation, processed=current.processed + 1, total=current.total))
        return True

    def _publish(self, value: Progress) -> None:
        self._value = value
        for observer in list(self._observers):
            observer(value)
