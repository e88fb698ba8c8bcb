from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from clustering.types import ClusterDescriptor


@dataclass(frozen=True)
class DescriptorDiff:
    added: list[ClusterDescriptor]
    removed: list[ClusterDescriptor]
    kept: list[ClusterDescriptor]


def diff_descriptors(
    previous: Sequence[ClusterDescriptor],
    current: Sequence[ClusterDescriptor],
) -> DescriptorDiff:
    """
    Marker changes between two recomputes, keyed by membership.

    A marker whose members are unchanged is kept even if its position moved; the
    map only needs to add/remove the rest.
    """
    prev_keys = {d.key for d in previous}
    cur_keys = {d.key for d in current}
    return DescriptorDiff(
        added=[d for d in current if d.key not in prev_keys],
        removed=[d for d in previous if d.key not in cur_keys],
        kept=[d for d in current if d.key in prev_keys],
    )


def iter_batches(
    descriptors: Sequence[ClusterDescriptor], size: int = 100
) -> Iterator[list[ClusterDescriptor]]:
    # Large marker sets get added to the map in chunks to keep the UI responsive.
    step = max(1, int(size))
    for i in range(0, len(descriptors), step):
        yield list(descriptors[i : i + step])
