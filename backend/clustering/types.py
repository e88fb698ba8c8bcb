from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from geo.types import Coordinate
from gyms.types import GymPoint, PointId


@dataclass(frozen=True)
class ClusterDescriptor:
    """
    One map marker: a single gym or a group of nearby gyms.

    Invariants:
    - count == len(member_ids)
    - a pinned descriptor is always a singleton
    - `representative` is set exactly when count == 1 (for the name/address callout);
      multi-member markers only carry the count badge.
    """

    coordinate: Coordinate
    count: int
    member_ids: tuple[PointId, ...]
    is_pinned: bool = False
    representative: GymPoint | None = None

    def __post_init__(self) -> None:
        if self.count != len(self.member_ids):
            raise ValueError(
                f"count={self.count} does not match {len(self.member_ids)} member ids"
            )
        if self.count < 1:
            raise ValueError("A cluster descriptor needs at least one member")
        if self.is_pinned and self.count != 1:
            raise ValueError("A pinned descriptor must have exactly one member")
        if (self.representative is not None) != (self.count == 1):
            raise ValueError("representative must be set exactly for single-member descriptors")

    @property
    def key(self) -> tuple[bool, tuple[PointId, ...]]:
        """
        Stable identity for diffing marker sets across recomputes.

        Ids keep their type, so 2 and "2" are different members.
        """
        ids = sorted(self.member_ids, key=lambda i: (type(i).__name__, i))
        return (self.is_pinned, tuple(ids))

    @classmethod
    def single(cls, point: GymPoint, *, is_pinned: bool = False) -> "ClusterDescriptor":
        return cls(
            coordinate=point.coordinate,
            count=1,
            member_ids=(point.id,),
            is_pinned=is_pinned,
            representative=point,
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "coordinate": {"lat": self.coordinate.lat, "lon": self.coordinate.lon},
            "count": self.count,
            "memberIds": list(self.member_ids),
            "isPinned": self.is_pinned,
        }
        if self.representative is not None:
            r = self.representative
            out["representative"] = {
                "id": r.id,
                "latitude": r.latitude,
                "longitude": r.longitude,
                **r.props,
            }
        return out


@dataclass(frozen=True)
class ClusterResult:
    """
    Descriptors plus counters/timings for the HUD and telemetry.
    """

    descriptors: list[ClusterDescriptor]
    stats: dict[str, Any] = field(default_factory=dict)
