from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Sequence

from shapely.geometry import Point
from shapely.geometry import box as shapely_box
from shapely.strtree import STRtree

from geo.types import BBox
from gyms.types import GymPoint, PointId


Fingerprint = tuple[tuple[PointId, float | None, float | None], ...]


@dataclass
class PointIndex:
    """
    STRtree over the valid-location points of one point set.

    Notes:
    - Input data is EPSG:4326 (lon/lat degrees); we index in degrees since the
      viewport filter is a plain degree bbox.
    - Queries return positions in the indexed list, ascending, so the
      order-dependent clustering downstream stays reproducible.
    - An index can be reused for any point list with the same `fingerprint`
      (same ids and coordinates in the same order); display props may differ.
    """

    fingerprint: Fingerprint

    _tree: STRtree = field(repr=False)
    # tree position -> position in the indexed list
    _positions: list[int] = field(default_factory=list, repr=False)
    # (lon, lat) per indexed position, None for invalid locations
    _coords: list[tuple[float, float] | None] = field(default_factory=list, repr=False)

    # Caches keyed by the exact bbox
    _query_cache: dict[tuple[float, float, float, float], list[int]] = field(
        default_factory=dict, repr=False
    )

    def __len__(self) -> int:
        return len(self._coords)

    def query_positions(self, bbox: BBox) -> list[int]:
        """
        Positions of points inside `bbox` (inclusive), ascending.

        STRtree gives envelope candidates; every candidate is rechecked with the
        exact comparison so results never depend on index internals.
        """
        b = bbox.normalized()
        key = (b.min_lon, b.min_lat, b.max_lon, b.max_lat)
        cached = self._query_cache.get(key)
        if cached is not None:
            return list(cached)

        idxs = _to_int_list(
            self._tree.query(shapely_box(b.min_lon, b.min_lat, b.max_lon, b.max_lat))
        )
        out: list[int] = []
        for pos in sorted(self._positions[i] for i in idxs):
            lon, lat = self._coords[pos]  # type: ignore[misc]
            if b.contains(lon, lat):
                out.append(pos)

        bounded_cache_put(self._query_cache, key, out, max_items=64)
        return list(out)

    def query(self, points: Sequence[GymPoint], bbox: BBox) -> list[GymPoint]:
        """
        Members of `points` inside `bbox`, in input order.

        `points` must match this index's fingerprint.
        """
        if len(points) != len(self):
            raise ValueError(
                f"Index covers {len(self)} points, got a list of {len(points)}"
            )
        return [points[i] for i in self.query_positions(bbox)]


def point_set_fingerprint(points: Sequence[GymPoint]) -> Fingerprint:
    return tuple((p.id, p.latitude, p.longitude) for p in points)


def build_point_index(points: Sequence[GymPoint]) -> PointIndex:
    geoms: list[Point] = []
    positions: list[int] = []
    coords: list[tuple[float, float] | None] = []
    for pos, p in enumerate(points):
        if not p.has_valid_location:
            coords.append(None)
            continue
        lon = float(p.longitude)  # type: ignore[arg-type]
        lat = float(p.latitude)  # type: ignore[arg-type]
        coords.append((lon, lat))
        geoms.append(Point(lon, lat))
        positions.append(pos)
    return PointIndex(
        fingerprint=point_set_fingerprint(points),
        _tree=STRtree(geoms),
        _positions=positions,
        _coords=coords,
    )


def _to_int_list(idxs: Any) -> list[int]:
    # Shapely 2 STRtree returns a numpy array of indices.
    if idxs is None:
        return []
    return [int(i) for i in idxs]


_cache_lock = threading.Lock()


def bounded_cache_put(cache: dict, key, value, *, max_items: int) -> None:
    """
    Insert into a dict used as a FIFO cache, evicting the oldest entry past `max_items`.

    Indexes and their query caches are shared across request threads. All writers
    go through one lock; readers use plain `dict.get`.
    """
    with _cache_lock:
        cache[key] = value
        while len(cache) > max_items:
            oldest = next(iter(cache))
            if oldest == key:
                break
            cache.pop(oldest, None)
