from __future__ import annotations

from typing import Sequence

from geo.index import PointIndex
from geo.types import Viewport
from gyms.types import GymPoint


def filter_visible(
    points: Sequence[GymPoint],
    viewport: Viewport,
    buffer_deg: float = 0.1,
    *,
    index: PointIndex | None = None,
) -> list[GymPoint]:
    """
    Points inside the viewport plus `buffer_deg` on every side (inclusive).

    Keeps input order and drops points without a valid location. When an index
    built over the same point list is given, it is used to find candidates; the
    result is the same either way.
    """
    bbox = viewport.bounds(buffer_deg)
    if index is not None:
        return index.query(points, bbox)
    return [
        p
        for p in points
        if p.has_valid_location and bbox.contains(float(p.longitude), float(p.latitude))  # type: ignore[arg-type]
    ]
