from __future__ import annotations

import pytest

from clustering.thresholds import pixel_threshold
from geo.types import Span


@pytest.mark.parametrize(
    "lat_delta,lon_delta,expected",
    [
        (12.0, 10.0, 100.0),
        (5.0001, 0.1, 100.0),
        (5.0, 5.0, 80.0),
        (0.1, 2.5, 80.0),
        (2.0, 2.0, 60.0),
        (0.6, 0.2, 60.0),
        (0.5, 0.5, 40.0),
        (0.01, 0.02, 40.0),
    ],
)
def test_threshold_bands_use_larger_delta(lat_delta, lon_delta, expected):
    assert pixel_threshold(Span(lat_delta=lat_delta, lon_delta=lon_delta)) == expected
