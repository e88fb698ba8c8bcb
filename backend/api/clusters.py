from __future__ import annotations

import json
import logging
import time
from typing import Any, Sequence

from api.schemas import ClustersRequest, ZoomRequest
from clustering.config import default_projection, render_batch_size, viewport_buffer_deg
from clustering.engine import ClusterEngine
from clustering.region import region_for_tap
from clustering.render import iter_batches
from geo.index import (
    Fingerprint,
    PointIndex,
    bounded_cache_put,
    build_point_index,
    point_set_fingerprint,
)
from geo.projection import projection_for
from geo.types import Region
from gyms.types import GymPoint
from telemetry.singleton import get_store

log = logging.getLogger(__name__)


_index_cache: dict[Fingerprint, PointIndex] = {}


def _index_cached(points: Sequence[GymPoint]) -> tuple[PointIndex, bool]:
    """
    Reuse the spatial index while the gym list is unchanged.

    Pan/zoom refreshes post the same list over and over; only the viewport moves.
    """
    key = point_set_fingerprint(points)
    cached = _index_cache.get(key)
    if cached is not None:
        return cached, True
    index = build_point_index(points)
    bounded_cache_put(_index_cache, key, index, max_items=8)
    return index, False


def region_to_json(region: Region | None) -> dict[str, Any] | None:
    if region is None:
        return None
    return {
        "center": {"lat": region.center.lat, "lon": region.center.lon},
        "span": {"latDelta": region.span.lat_delta, "lonDelta": region.span.lon_delta},
    }


def handle_clusters(body: ClustersRequest) -> dict[str, Any]:
    t0 = time.perf_counter()
    points = [r.to_point() for r in body.points]
    viewport = body.viewport.to_viewport()
    projection_name = body.projection or default_projection()
    projection = projection_for(
        projection_name,
        width_px=body.screen.width,
        height_px=body.screen.height,
        heading_deg=body.screen.heading,
    )

    index, cache_hit = _index_cached(points)
    engine = ClusterEngine(buffer_deg=viewport_buffer_deg())
    result = engine.recompute_with_stats(
        points, viewport, body.pinnedId, projection=projection, index=index
    )

    batch_size = render_batch_size()
    clusters = [d.to_json() for d in result.descriptors]
    payload: dict[str, Any] = {
        "clusters": clusters,
        "batches": [len(b) for b in iter_batches(result.descriptors, batch_size)],
        "meta": {"stats": dict(result.stats)},
    }
    stats = payload["meta"]["stats"]
    stats["projection"] = projection_name
    stats["cache"] = {"indexHit": cache_hit}
    stats["batchSize"] = batch_size
    stats["payloadBytes"] = len(json.dumps(clusters, ensure_ascii=False, default=str))
    stats["timingsMs"]["request"] = round((time.perf_counter() - t0) * 1000.0, 3)

    _record(
        "/clusters",
        projection=projection_name,
        span={"latDelta": viewport.span.lat_delta, "lonDelta": viewport.span.lon_delta},
        stats=stats,
    )
    return payload


def handle_zoom(body: ZoomRequest) -> dict[str, Any]:
    members = [r.to_point() for r in body.members]
    member_ids = body.memberIds if body.memberIds is not None else [p.id for p in members]
    tap = region_for_tap(
        body.coordinate.to_coordinate(),
        member_ids,
        members,
        body.viewport.to_viewport(),
    )
    return {"region": region_to_json(tap.region), "mode": tap.mode}


def _record(endpoint: str, *, projection: str, span: dict[str, float], stats: dict[str, Any]) -> None:
    # Telemetry must never break a request.
    try:
        store = get_store()
        if store is not None:
            store.record(endpoint=endpoint, projection=projection, span=span, stats=stats)
    except Exception:
        log.warning("Telemetry record failed for %s", endpoint, exc_info=True)
