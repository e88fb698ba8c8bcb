from __future__ import annotations

import pytest

from clustering.greedy import cluster_points
from geo.projection import LinearProjection
from geo.types import Coordinate, Span, Viewport
from gyms.types import GymPoint


def _at(pid, dlat=0.0, dlon=0.0, **props) -> GymPoint:
    # Offsets from the fixture viewport center; 0.001 degree == 1 px.
    return GymPoint(id=pid, latitude=51.5 + dlat, longitude=-0.1 + dlon, props=props)


def test_empty_input_gives_no_clusters(projection, viewport):
    assert cluster_points([], projection, viewport) == []


def test_single_point_is_its_own_marker(projection, viewport):
    p = _at("solo", name="Solo Gym")
    out = cluster_points([p], projection, viewport)
    assert len(out) == 1
    d = out[0]
    assert d.count == 1
    assert d.member_ids == ("solo",)
    assert d.representative == p
    assert d.representative.props["name"] == "Solo Gym"
    assert d.coordinate == Coordinate(lat=51.5, lon=-0.1)
    assert d.is_pinned is False


def test_coincident_points_form_one_cluster(projection, viewport):
    pts = [_at(i) for i in range(7)]
    out = cluster_points(pts, projection, viewport)
    assert len(out) == 1
    assert out[0].count == 7
    assert out[0].representative is None
    assert out[0].coordinate.lat == pytest.approx(51.5)
    assert out[0].coordinate.lon == pytest.approx(-0.1)


def test_threshold_is_inclusive_and_measured_in_pixels(projection, viewport):
    # 30 px apart merges, 50 px apart doesn't (threshold 40 px at this span).
    near = cluster_points([_at("a"), _at("b", dlon=0.03)], projection, viewport)
    far = cluster_points([_at("a"), _at("b", dlon=0.05)], projection, viewport)
    assert [d.count for d in near] == [2]
    assert [d.count for d in far] == [1, 1]


def test_multi_member_coordinate_is_mean_of_members(projection, viewport):
    pts = [_at("a"), _at("b", dlat=0.01), _at("c", dlon=0.02)]
    (d,) = cluster_points(pts, projection, viewport)
    assert d.count == 3
    assert d.coordinate.lat == pytest.approx(51.5 + 0.01 / 3)
    assert d.coordinate.lon == pytest.approx(-0.1 + 0.02 / 3)


def test_membership_is_measured_from_the_seed_only(projection, viewport):
    # a -- 30px -- b -- 30px -- c : c is 60px from a.
    a, b, c = _at("a"), _at("b", dlon=0.03), _at("c", dlon=0.06)

    seeded_by_a = cluster_points([a, b, c], projection, viewport)
    assert [d.member_ids for d in seeded_by_a] == [("a", "b"), ("c",)]

    # Same layout, different order: b reaches both neighbours.
    seeded_by_b = cluster_points([b, a, c], projection, viewport)
    assert [d.member_ids for d in seeded_by_b] == [("b", "a", "c")]


def test_every_point_lands_in_exactly_one_cluster(projection, viewport):
    pts = [
        _at(f"g{i}", dlat=(i % 6) * 0.013, dlon=(i // 6) * 0.017)
        for i in range(36)
    ]
    out = cluster_points(pts, projection, viewport)
    ids = [i for d in out for i in d.member_ids]
    assert sorted(ids) == sorted(p.id for p in pts)
    assert len(ids) == len(set(ids))
    assert all(d.count == len(d.member_ids) for d in out)


def test_invalid_locations_are_skipped(projection, viewport):
    pts = [_at("ok"), GymPoint(id="bad", latitude=None, longitude=-0.1)]
    out = cluster_points(pts, projection, viewport)
    assert [d.member_ids for d in out] == [("ok",)]


def test_zooming_out_never_increases_marker_count():
    projection = LinearProjection(width_px=400.0, height_px=400.0)
    center = Coordinate(lat=51.5, lon=-0.1)
    pts = [
        GymPoint(id=f"g{r}-{c}", latitude=51.5 + (r - 2) * 0.05, longitude=-0.1 + (c - 2) * 0.05)
        for r in range(5)
        for c in range(5)
    ]

    counts = []
    # One span per threshold band: 40, 60, 80, 100 px.
    for span in (0.4, 1.0, 3.0, 6.0):
        vp = Viewport(center=center, span=Span(lat_delta=span, lon_delta=span))
        counts.append(len(cluster_points(pts, projection, vp)))

    assert counts[0] == 25
    assert counts[-1] == 1
    assert all(a >= b for a, b in zip(counts, counts[1:]))


def test_explicit_threshold_overrides_band(projection, viewport):
    pts = [_at("a"), _at("b", dlon=0.03)]
    assert len(cluster_points(pts, projection, viewport, threshold_px=10.0)) == 2
