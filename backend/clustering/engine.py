from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Protocol, Sequence

from clustering.config import DEFAULT_VIEWPORT_BUFFER_DEG
from clustering.greedy import cluster_points
from clustering.pinned import pinned_descriptor, split_pinned
from clustering.region import bounding_region
from clustering.thresholds import pixel_threshold
from clustering.types import ClusterDescriptor, ClusterResult
from clustering.viewport_filter import filter_visible
from geo.index import PointIndex
from geo.projection import Projection
from geo.types import Region, Viewport
from gyms.types import GymPoint, PointId

log = logging.getLogger(__name__)


def recompute_with_stats(
    points: Sequence[GymPoint],
    viewport: Viewport,
    pinned_id: PointId | None = None,
    *,
    projection: Projection,
    buffer_deg: float = DEFAULT_VIEWPORT_BUFFER_DEG,
    index: PointIndex | None = None,
) -> ClusterResult:
    """
    Full marker pass: valid-location filter -> viewport filter -> pinned split ->
    greedy clustering -> pinned marker appended last.

    `index`, when given, must have been built over `points`.
    """
    t0 = time.perf_counter()
    n_valid = sum(1 for p in points if p.has_valid_location)
    visible = filter_visible(points, viewport, buffer_deg, index=index)
    t_filter_ms = (time.perf_counter() - t0) * 1000.0

    split = split_pinned(visible, pinned_id)
    threshold = pixel_threshold(viewport.span)

    t1 = time.perf_counter()
    descriptors = cluster_points(split.rest, projection, viewport, threshold_px=threshold)
    t_cluster_ms = (time.perf_counter() - t1) * 1000.0

    pinned = pinned_descriptor(split.pinned)
    if pinned is not None:
        descriptors.append(pinned)

    stats = {
        "inputPoints": len(points),
        "validPoints": n_valid,
        "visiblePoints": len(visible),
        "clusters": len(descriptors),
        "pinned": pinned is not None,
        "thresholdPx": threshold,
        "spanMaxDeg": viewport.span.max_delta,
        "indexed": index is not None,
        "timingsMs": {
            "filter": round(t_filter_ms, 3),
            "cluster": round(t_cluster_ms, 3),
            "total": round((time.perf_counter() - t0) * 1000.0, 3),
        },
    }
    log.debug(
        "recompute: %d points, %d visible, %d markers (threshold %.0fpx, pinned=%s)",
        len(points),
        len(visible),
        len(descriptors),
        threshold,
        pinned is not None,
    )
    return ClusterResult(descriptors=descriptors, stats=stats)


def recompute(
    points: Sequence[GymPoint],
    viewport: Viewport,
    pinned_id: PointId | None = None,
    *,
    projection: Projection,
    buffer_deg: float = DEFAULT_VIEWPORT_BUFFER_DEG,
    index: PointIndex | None = None,
) -> list[ClusterDescriptor]:
    return recompute_with_stats(
        points,
        viewport,
        pinned_id,
        projection=projection,
        buffer_deg=buffer_deg,
        index=index,
    ).descriptors


class MarkerEngine(Protocol):
    """
    What the rendering layer talks to.

    Any implementation must be safe to call repeatedly with the latest inputs;
    stale results are simply discarded by the caller.
    """

    def recompute(
        self,
        points: Sequence[GymPoint],
        viewport: Viewport,
        pinned_id: PointId | None = None,
        *,
        projection: Projection,
        index: PointIndex | None = None,
    ) -> list[ClusterDescriptor]: ...

    def bounding_region(self, points: Sequence[GymPoint]) -> Region | None: ...


@dataclass(frozen=True)
class ClusterEngine(MarkerEngine):
    """
    Stateless facade over the clustering pipeline; only carries its viewport buffer.
    """

    buffer_deg: float = DEFAULT_VIEWPORT_BUFFER_DEG

    def recompute(
        self,
        points: Sequence[GymPoint],
        viewport: Viewport,
        pinned_id: PointId | None = None,
        *,
        projection: Projection,
        index: PointIndex | None = None,
    ) -> list[ClusterDescriptor]:
        return self.recompute_with_stats(
            points, viewport, pinned_id, projection=projection, index=index
        ).descriptors

    def recompute_with_stats(
        self,
        points: Sequence[GymPoint],
        viewport: Viewport,
        pinned_id: PointId | None = None,
        *,
        projection: Projection,
        index: PointIndex | None = None,
    ) -> ClusterResult:
        return recompute_with_stats(
            points,
            viewport,
            pinned_id,
            projection=projection,
            buffer_deg=self.buffer_deg,
            index=index,
        )

    def bounding_region(self, points: Sequence[GymPoint]) -> Region | None:
        return bounding_region(points)
