from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from clustering.viewport_filter import filter_visible
from geo.index import bounded_cache_put, build_point_index
from geo.types import BBox, Coordinate, Span, Viewport
from gyms.types import GymPoint


def _vp() -> Viewport:
    return Viewport(center=Coordinate(lat=10.0, lon=20.0), span=Span(lat_delta=2.0, lon_delta=4.0))


def _points() -> list[GymPoint]:
    # Bounds with a 0.5 buffer: lat [8.5, 11.5], lon [17.5, 22.5]
    return [
        GymPoint(id="center", latitude=10.0, longitude=20.0),
        GymPoint(id="north-edge", latitude=11.5, longitude=20.0),
        GymPoint(id="west-edge", latitude=10.0, longitude=17.5),
        GymPoint(id="just-outside", latitude=11.5001, longitude=20.0),
        GymPoint(id="in-buffer", latitude=8.7, longitude=22.4),
        GymPoint(id="far", latitude=-40.0, longitude=100.0),
        GymPoint(id="no-location", latitude=None, longitude=20.0),
        GymPoint(id="bad-lat", latitude=120.0, longitude=20.0),
    ]


def test_filter_is_inclusive_and_respects_buffer():
    out = filter_visible(_points(), _vp(), 0.5)
    assert [p.id for p in out] == ["center", "north-edge", "west-edge", "in-buffer"]


def test_zero_buffer_is_just_the_viewport():
    out = filter_visible(_points(), _vp(), 0.0)
    assert [p.id for p in out] == ["center"]


def test_index_gives_same_result_as_scan():
    pts = _points()
    index = build_point_index(pts)
    for buffer in (0.0, 0.1, 0.5, 50.0):
        assert filter_visible(pts, _vp(), buffer, index=index) == filter_visible(pts, _vp(), buffer)


def test_index_preserves_input_order():
    pts = [
        GymPoint(id=f"p{i}", latitude=10.0 + (i % 7) * 0.01, longitude=20.0 - (i % 5) * 0.01)
        for i in range(60)
    ]
    index = build_point_index(pts)
    out = filter_visible(pts, _vp(), 0.1, index=index)
    assert [p.id for p in out] == [p.id for p in pts]


def test_cached_index_serves_fresh_props():
    a = [GymPoint(id=1, latitude=10.0, longitude=20.0, props={"name": "old"})]
    b = [GymPoint(id=1, latitude=10.0, longitude=20.0, props={"name": "new"})]
    index = build_point_index(a)
    out = filter_visible(b, _vp(), 0.1, index=index)
    assert out[0].props["name"] == "new"


def test_empty_input():
    assert filter_visible([], _vp()) == []
    assert filter_visible([], _vp(), index=build_point_index([])) == []


def test_bounded_cache_evicts_oldest_first():
    cache: dict = {}
    for i in range(5):
        bounded_cache_put(cache, i, str(i), max_items=3)
    assert list(cache) == [2, 3, 4]


def test_shared_index_handles_concurrent_queries():
    pts = _points()
    index = build_point_index(pts)
    boxes = [
        BBox(min_lon=17.0 + i * 0.01, min_lat=8.0, max_lon=23.0, max_lat=12.0) for i in range(400)
    ]
    expected = [index.query_positions(b) for b in boxes]
    index._query_cache.clear()

    with ThreadPoolExecutor(max_workers=8) as pool:
        got = list(pool.map(index.query_positions, boxes))

    assert got == expected
    assert len(index._query_cache) <= 64
