from __future__ import annotations

import pytest

from clustering.config import default_projection, render_batch_size, viewport_buffer_deg


def test_defaults(monkeypatch):
    for name in ("GYMMAP_VIEWPORT_BUFFER_DEG", "GYMMAP_RENDER_BATCH_SIZE", "GYMMAP_PROJECTION"):
        monkeypatch.delenv(name, raising=False)
    assert viewport_buffer_deg() == 0.1
    assert render_batch_size() == 100
    assert default_projection() == "mercator"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("GYMMAP_VIEWPORT_BUFFER_DEG", "0.25")
    monkeypatch.setenv("GYMMAP_RENDER_BATCH_SIZE", "20")
    monkeypatch.setenv("GYMMAP_PROJECTION", "Linear")
    assert viewport_buffer_deg() == 0.25
    assert render_batch_size() == 20
    assert default_projection() == "linear"


def test_malformed_values_fall_back(monkeypatch):
    monkeypatch.setenv("GYMMAP_VIEWPORT_BUFFER_DEG", "lots")
    monkeypatch.setenv("GYMMAP_RENDER_BATCH_SIZE", "-5")
    monkeypatch.setenv("GYMMAP_PROJECTION", "globe")
    assert viewport_buffer_deg() == 0.1
    assert render_batch_size() == 1
    assert default_projection() == "mercator"


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e400"])
def test_non_finite_values_fall_back(monkeypatch, raw):
    monkeypatch.setenv("GYMMAP_VIEWPORT_BUFFER_DEG", raw)
    monkeypatch.setenv("GYMMAP_RENDER_BATCH_SIZE", raw)
    assert viewport_buffer_deg() == 0.1
    assert render_batch_size() == 100
