from __future__ import annotations

from typing import Sequence

from clustering.thresholds import pixel_threshold
from clustering.types import ClusterDescriptor
from geo.projection import Projection
from geo.types import Coordinate, PixelPoint, Viewport, pixel_distance
from gyms.types import GymPoint, PointId


def cluster_points(
    points: Sequence[GymPoint],
    projection: Projection,
    viewport: Viewport,
    *,
    threshold_px: float | None = None,
) -> list[ClusterDescriptor]:
    """
    Greedy single-linkage grouping in screen space.

    Walk points in input order; each unprocessed point seeds a group and pulls in
    every other unprocessed point within `threshold_px` of the *seed* (not of
    points that joined later). Groups are never merged afterwards, so the result
    depends on input order: callers pass points in a stable order (e.g. by id).
    """
    threshold = pixel_threshold(viewport.span) if threshold_px is None else float(threshold_px)

    candidates = [p for p in points if p.has_valid_location]
    # Project once per point per call; the projection can be comparatively costly.
    pixels: list[PixelPoint] = [projection.project(p.coordinate, viewport) for p in candidates]

    processed: set[PointId] = set()
    out: list[ClusterDescriptor] = []
    for i, seed in enumerate(candidates):
        if seed.id in processed:
            continue
        processed.add(seed.id)
        group = [seed]

        seed_px = pixels[i]
        for j, other in enumerate(candidates):
            if other.id in processed:
                continue
            if pixel_distance(seed_px, pixels[j]) <= threshold:
                group.append(other)
                processed.add(other.id)

        out.append(_descriptor_for(group))
    return out


def _descriptor_for(group: list[GymPoint]) -> ClusterDescriptor:
    if len(group) == 1:
        return ClusterDescriptor.single(group[0])

    # Naive mean of lat/lon; fine for the small spans we cluster at.
    n = len(group)
    lat = sum(float(p.latitude) for p in group) / n  # type: ignore[arg-type]
    lon = sum(float(p.longitude) for p in group) / n  # type: ignore[arg-type]
    return ClusterDescriptor(
        coordinate=Coordinate(lat=lat, lon=lon),
        count=n,
        member_ids=tuple(p.id for p in group),
    )
