"""Stable per-year colour assignment."""
from __future__ import annotations

from typing import Dict, Iterable, Sequence

from salesmap.storage.models import CustomerRecord

# Tailwind 500 shades: gray, red, yellow, blue, indigo, purple, pink, amber,
# lime, emerald, teal, cyan, sky, violet, fuchsia, rose, slate, zinc, neutral, stone
PALETTE: tuple[str, ...] = (
    "#6b7280",
    "#ef4444",
    "#eab308",
    "#3b82f6",
    "#6366f1",
    "#a855f7",
    "#ec4899",
    "#f59e0b",
    "#84cc16",
    "#10b981",
    "#14b8a6",
    "#06b6d4",
    "#0ea5e9",
    "#8b5cf6",
    "#d946ef",
    "#f43f5e",
    "#64748b",
    "#71717a",
    "#737373",
    "#78716c",
)


def assign_colors(records: Iterable[CustomerRecord], palette: Sequence[str] = PALETTE) -> Dict[str, str]:
    """Bind each distinct year key to a palette entry in first-seen order.

    The palette cycles once it runs out, so more than ``len(palette)`` years
    share colours.
    """
    if not palette:
        raise ValueError("palette must not be empty")
    colors: Dict[str, str] = {}
    for record in records:
        key = record.year_key
        if key not in colors:
            colors[key] = palette[len(colors) % len(palette)]
    return colors
