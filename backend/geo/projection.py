from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from pyproj import Transformer

from geo.types import Coordinate, PixelPoint, Viewport


_MAX_MERCATOR_LAT = 85.05112878


class Projection(Protocol):
    """
    Screen projection capability supplied by whatever map widget is rendering.

    Implementations must reflect the live view geometry (zoom, rotation) for the
    given viewport. The clustering engine only measures pixel distances with it.
    """

    def project(self, coord: Coordinate, viewport: Viewport) -> PixelPoint: ...


@dataclass(frozen=True)
class LinearProjection:
    """
    Equirectangular screen mapping: the viewport's north-west corner is (0, 0),
    its south-east corner is (width_px, height_px).

    Matches what a map widget shows at city/region scale closely enough, and is
    trivially predictable in tests.
    """

    width_px: float = 390.0
    height_px: float = 844.0

    def project(self, coord: Coordinate, viewport: Viewport) -> PixelPoint:
        lat_delta = viewport.span.lat_delta or 1e-9
        lon_delta = viewport.span.lon_delta or 1e-9
        west = viewport.center.lon - viewport.span.lon_delta / 2.0
        north = viewport.center.lat + viewport.span.lat_delta / 2.0
        x = (coord.lon - west) / lon_delta * self.width_px
        y = (north - coord.lat) / lat_delta * self.height_px
        return PixelPoint(x, y)


@lru_cache(maxsize=1)
def transformer_4326_to_3857() -> Transformer:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def _clamp_lat(lat: float) -> float:
    # Clamp to WebMercator-supported latitudes.
    return max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lat)))


@dataclass(frozen=True)
class WebMercatorProjection:
    """
    Screen projection the way slippy-map widgets draw: EPSG:3857 meters scaled so
    the viewport span fills the screen, optionally rotated by the map heading.

    Heading is clockwise degrees from north (the map rotates the other way on
    screen), so a heading of 90 puts east at the top.
    """

    width_px: float = 390.0
    height_px: float = 844.0
    heading_deg: float = 0.0

    def _meters(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = transformer_4326_to_3857().transform(float(lon), _clamp_lat(lat))
        return float(x), float(y)

    def project(self, coord: Coordinate, viewport: Viewport) -> PixelPoint:
        c = viewport.center
        s = viewport.span
        cx, cy = self._meters(c.lon, c.lat)
        _, north_y = self._meters(c.lon, c.lat + s.lat_delta / 2.0)
        _, south_y = self._meters(c.lon, c.lat - s.lat_delta / 2.0)
        west_x, _ = self._meters(c.lon - s.lon_delta / 2.0, c.lat)
        east_x, _ = self._meters(c.lon + s.lon_delta / 2.0, c.lat)

        # avoid division by zero on degenerate spans
        scale_x = self.width_px / max(east_x - west_x, 1e-6)
        scale_y = self.height_px / max(north_y - south_y, 1e-6)

        x, y = self._meters(coord.lon, coord.lat)
        dx = (x - cx) * scale_x
        dy = (cy - y) * scale_y  # screen y grows downwards

        if self.heading_deg:
            theta = math.radians(-self.heading_deg)
            cos_t = math.cos(theta)
            sin_t = math.sin(theta)
            dx, dy = dx * cos_t - dy * sin_t, dx * sin_t + dy * cos_t

        return PixelPoint(self.width_px / 2.0 + dx, self.height_px / 2.0 + dy)


def projection_for(
    name: str | None,
    *,
    width_px: float,
    height_px: float,
    heading_deg: float = 0.0,
) -> Projection:
    n = (name or "linear").strip().lower()
    if n == "mercator":
        return WebMercatorProjection(
            width_px=float(width_px),
            height_px=float(height_px),
            heading_deg=float(heading_deg),
        )
    return LinearProjection(width_px=float(width_px), height_px=float(height_px))
