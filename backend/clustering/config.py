from __future__ import annotations

import logging
import math
import os

log = logging.getLogger(__name__)

DEFAULT_VIEWPORT_BUFFER_DEG = 0.1
DEFAULT_RENDER_BATCH_SIZE = 100
DEFAULT_PROJECTION = "mercator"


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        v = float(raw)
    except ValueError:
        v = math.nan
    if not math.isfinite(v):
        log.warning("Ignoring malformed %s=%r, using %s", name, raw, default)
        return default
    return v


def viewport_buffer_deg() -> float:
    # Margin around the viewport so markers don't pop in at the edges.
    v = _env_float("GYMMAP_VIEWPORT_BUFFER_DEG", DEFAULT_VIEWPORT_BUFFER_DEG)
    return max(0.0, v)


def render_batch_size() -> int:
    v = int(_env_float("GYMMAP_RENDER_BATCH_SIZE", DEFAULT_RENDER_BATCH_SIZE))
    return max(1, v)


def default_projection() -> str:
    n = (os.getenv("GYMMAP_PROJECTION") or DEFAULT_PROJECTION).strip().lower()
    if n in {"linear", "mercator"}:
        return n
    return DEFAULT_PROJECTION
