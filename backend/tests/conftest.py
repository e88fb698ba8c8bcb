import os
import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `clustering.*`, `geo.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

# Keep test runs from writing into the repo's telemetry DB; telemetry tests opt in.
os.environ["GYMMAP_TELEMETRY"] = "0"

from geo.projection import LinearProjection  # noqa: E402
from geo.types import Coordinate, Span, Viewport  # noqa: E402


# London-ish viewport: 0.4 x 0.4 degrees on a 400 x 400 px linear screen,
# so 1 px == 0.001 degree on both axes and the merge threshold is 40 px.
LONDON = Coordinate(lat=51.5, lon=-0.1)


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(center=LONDON, span=Span(lat_delta=0.4, lon_delta=0.4))


@pytest.fixture
def projection() -> LinearProjection:
    return LinearProjection(width_px=400.0, height_px=400.0)
