from __future__ import annotations

from geo.types import Span


def pixel_threshold(span: Span) -> float:
    """
    Merge distance in screen pixels for the current zoom.

    Step bands on the larger span delta; zoomed-out views merge more aggressively.
    """
    d = span.max_delta
    if d > 5.0:
        return 100.0
    if d > 2.0:
        return 80.0
    if d > 0.5:
        return 60.0
    return 40.0
