from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, TypeAlias


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True)
class Span:
    """
    Visible height/width of a viewport in degrees. Larger span = more zoomed out.
    """

    lat_delta: float
    lon_delta: float

    @property
    def max_delta(self) -> float:
        return max(self.lat_delta, self.lon_delta)


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def normalized(self) -> "BBox":
        min_lon = min(self.min_lon, self.max_lon)
        max_lon = max(self.min_lon, self.max_lon)
        min_lat = min(self.min_lat, self.max_lat)
        max_lat = max(self.min_lat, self.max_lat)
        return BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)

    def contains(self, lon: float, lat: float) -> bool:
        # Inclusive on every edge.
        return self.min_lon <= lon <= self.max_lon and self.min_lat <= lat <= self.max_lat

    def rounded_key(self, decimals: int = 4) -> tuple[float, float, float, float]:
        """
        A stable, hashable key for caching viewport-derived computations.
        """
        b = self.normalized()
        return (
            round(b.min_lon, decimals),
            round(b.min_lat, decimals),
            round(b.max_lon, decimals),
            round(b.max_lat, decimals),
        )


@dataclass(frozen=True)
class Viewport:
    """
    What the map currently shows: a center plus a span in degrees.
    """

    center: Coordinate
    span: Span

    def bounds(self, buffer_deg: float = 0.0) -> BBox:
        half_lat = self.span.lat_delta / 2.0 + buffer_deg
        half_lon = self.span.lon_delta / 2.0 + buffer_deg
        return BBox(
            min_lon=self.center.lon - half_lon,
            min_lat=self.center.lat - half_lat,
            max_lon=self.center.lon + half_lon,
            max_lat=self.center.lat + half_lat,
        )


# Zoom-to-fit produces the same shape as a viewport.
Region: TypeAlias = Viewport


# The app opens on the whole of the UK.
DEFAULT_VIEWPORT = Viewport(
    center=Coordinate(lat=54.5, lon=-2.0),
    span=Span(lat_delta=12.0, lon_delta=10.0),
)


class PixelPoint(NamedTuple):
    x: float
    y: float


def pixel_distance(a: PixelPoint, b: PixelPoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)
