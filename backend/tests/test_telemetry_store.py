from __future__ import annotations

from telemetry.singleton import get_store, reset_store


def test_telemetry_store_writes_rows(tmp_path, monkeypatch):
    db_path = tmp_path / "telemetry.duckdb"
    monkeypatch.setenv("GYMMAP_TELEMETRY_PATH", str(db_path))
    monkeypatch.setenv("GYMMAP_TELEMETRY", "1")

    store = get_store()
    assert store is not None

    store.record(
        endpoint="/clusters",
        projection="mercator",
        span={"latDelta": 0.4, "lonDelta": 0.3},
        stats={"inputPoints": 10, "visiblePoints": 7, "clusters": 3, "pinned": True, "timingsMs": {"total": 1.5}},
    )
    store.flush(timeout_s=2.0)

    # Use the existing connection; DuckDB disallows opening the same file with different configs.
    n = int(store.conn.execute("select count(*) from cluster_events").fetchone()[0])
    assert n == 1

    row = store.conn.execute(
        "select endpoint, projection, visible_points, clusters, pinned from cluster_events limit 1"
    ).fetchone()
    assert row == ("/clusters", "mercator", 7, 3, True)

    summary = store.summary(endpoint="/clusters")
    assert len(summary) == 1
    assert summary[0]["n"] == 1
    assert summary[0]["avgTotalMs"] == 1.5


def test_telemetry_disabled_returns_no_store(monkeypatch):
    monkeypatch.setenv("GYMMAP_TELEMETRY", "off")
    assert get_store() is None


def test_telemetry_reset_deletes_db(tmp_path, monkeypatch):
    db_path = tmp_path / "telemetry.duckdb"
    monkeypatch.setenv("GYMMAP_TELEMETRY_PATH", str(db_path))
    monkeypatch.setenv("GYMMAP_TELEMETRY", "1")

    store = get_store()
    assert store is not None
    store.record(
        endpoint="/clusters",
        projection="linear",
        span={"latDelta": 1.0, "lonDelta": 1.0},
        stats={},
    )
    assert store.path.resolve() == db_path.resolve()

    reset_store()
    assert not db_path.exists()
