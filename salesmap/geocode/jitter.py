"""Random offsets that keep markers for the same city apart."""
from __future__ import annotations

import random
from typing import Optional

from salesmap.storage.models import GeoPoint

JITTER_DEGREES = 0.0025


def jitter(point: GeoPoint, rng: Optional[random.Random] = None) -> GeoPoint:
    """Shift both axes by an independent uniform offset within JITTER_DEGREES."""
    source = rng or random
    return GeoPoint(
        lat=point.lat + source.uniform(-JITTER_DEGREES, JITTER_DEGREES),
        lng=point.lng + source.uniform(-JITTER_DEGREES, JITTER_DEGREES),
    )
