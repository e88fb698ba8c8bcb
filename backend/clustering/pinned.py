from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from clustering.types import ClusterDescriptor
from gyms.types import GymPoint, PointId


@dataclass(frozen=True)
class PinnedSplit:
    pinned: GymPoint | None
    rest: list[GymPoint]


def split_pinned(points: Sequence[GymPoint], pinned_id: PointId | None) -> PinnedSplit:
    """
    Pull the pinned gym out of the clusterable set.

    A pinned id that isn't among `points` (e.g. scrolled out of view) simply
    yields no pinned point; pinning never forces visibility.
    """
    if pinned_id is None:
        return PinnedSplit(pinned=None, rest=list(points))

    pinned: GymPoint | None = None
    rest: list[GymPoint] = []
    for p in points:
        if pinned is None and p.id == pinned_id:
            pinned = p
            continue
        rest.append(p)
    return PinnedSplit(pinned=pinned, rest=rest)


def pinned_descriptor(point: GymPoint | None) -> ClusterDescriptor | None:
    if point is None or not point.has_valid_location:
        return None
    return ClusterDescriptor.single(point, is_pinned=True)
