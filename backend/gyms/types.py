from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, TypeAlias, Union

from geo.types import Coordinate


PointId: TypeAlias = Union[str, int]


def valid_location(lat: float | None, lon: float | None) -> bool:
    """
    True when (lat, lon) is a displayable map location.

    Missing, non-finite or out-of-range values never reach the map.
    """
    if lat is None or lon is None:
        return False
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0


@dataclass(frozen=True)
class GymPoint:
    """
    A gym as the map sees it: a stable id, an optional location and opaque
    display attributes (name, address, ...) that are forwarded untouched.
    """

    id: PointId
    latitude: float | None
    longitude: float | None
    props: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def has_valid_location(self) -> bool:
        return valid_location(self.latitude, self.longitude)

    @property
    def coordinate(self) -> Coordinate:
        if not self.has_valid_location:
            raise ValueError(f"Point {self.id!r} has no valid location")
        return Coordinate(lat=float(self.latitude), lon=float(self.longitude))  # type: ignore[arg-type]


def only_valid(points: Iterable[GymPoint]) -> list[GymPoint]:
    return [p for p in points if p.has_valid_location]
