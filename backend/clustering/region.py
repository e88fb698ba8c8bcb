from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from geo.types import Coordinate, Region, Span, Viewport
from gyms.types import GymPoint, PointId, only_valid

log = logging.getLogger(__name__)

# 20% padding on each side of the members' extent.
REGION_PADDING_FACTOR = 1.4
# Coincident members would otherwise zoom to an unusable scale.
MIN_REGION_SPAN_DEG = 0.01

TapMode = Literal["bounding_box", "zoom_step", "none"]


@dataclass(frozen=True)
class TapResult:
    region: Region | None
    mode: TapMode


def bounding_region(points: Sequence[GymPoint]) -> Region | None:
    """
    Viewport that shows all `points` individually (zoom-to-fit on cluster tap).

    Returns None when there is no valid-location point: callers must treat that
    as "leave the viewport alone" rather than computing a region from nothing.
    """
    pts = only_valid(points)
    if not pts:
        log.debug("bounding_region: no valid-location members, no viewport change")
        return None

    lats = [float(p.latitude) for p in pts]  # type: ignore[arg-type]
    lons = [float(p.longitude) for p in pts]  # type: ignore[arg-type]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)

    center = Coordinate(lat=(min_lat + max_lat) / 2.0, lon=(min_lon + max_lon) / 2.0)
    span = Span(
        lat_delta=max((max_lat - min_lat) * REGION_PADDING_FACTOR, MIN_REGION_SPAN_DEG),
        lon_delta=max((max_lon - min_lon) * REGION_PADDING_FACTOR, MIN_REGION_SPAN_DEG),
    )
    return Viewport(center=center, span=span)


def zoom_step_region(
    coordinate: Coordinate, viewport: Viewport, *, factor: float = 0.5
) -> Region:
    """
    Generic cluster-tap fallback: zoom in one step around the tapped marker.
    """
    return Viewport(
        center=coordinate,
        span=Span(
            lat_delta=max(viewport.span.lat_delta * factor, MIN_REGION_SPAN_DEG),
            lon_delta=max(viewport.span.lon_delta * factor, MIN_REGION_SPAN_DEG),
        ),
    )


def region_for_tap(
    coordinate: Coordinate,
    member_ids: Sequence[PointId],
    members: Sequence[GymPoint],
    viewport: Viewport,
) -> TapResult:
    """
    What the map should do when a marker is tapped.

    Single markers open their callout and keep the viewport. Multi-member markers
    zoom to fit their members; if none of them has a usable location we fall back
    to a plain zoom step around the marker.
    """
    if len(member_ids) <= 1:
        return TapResult(region=None, mode="none")

    wanted = set(member_ids)
    region = bounding_region([p for p in members if p.id in wanted])
    if region is not None:
        return TapResult(region=region, mode="bounding_box")

    log.info(
        "Cluster of %d has no locatable members; zooming one step instead",
        len(member_ids),
    )
    return TapResult(region=zoom_step_region(coordinate, viewport), mode="zoom_step")
