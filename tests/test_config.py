from __future__ import annotations

from pathlib import Path

import pytest

from cosmicbirthday.config import FetchSettings


def test_defaults():
    settings = FetchSettings()
    assert (settings.start_year, settings.end_year) == (1960, 2100)
    assert settings.batch_size == 5
    assert settings.batch_delay == 5.0
    assert len(settings.years) == 141
    assert settings.coverage == "1960-2100"
    assert "{year}" in settings.moon_phases_url


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("COSMIC_START_YEAR", "2000")
    monkeypatch.setenv("COSMIC_END_YEAR", "2010")
    monkeypatch.setenv("COSMIC_BATCH_SIZE", "3")
    monkeypatch.setenv("COSMIC_BATCH_DELAY", "0.5")
    monkeypatch.setenv("COSMIC_OUTPUT_DIR", str(tmp_path))
    monkeypatch.setenv("COSMIC_IMCCE_ENABLED", "false")

    settings = FetchSettings.from_env()

    assert settings.years == list(range(2000, 2011))
    assert settings.batch_size == 3
    assert settings.batch_delay == 0.5
    assert settings.output_dir == Path(tmp_path)
    assert settings.imcce_enabled is False


def test_empty_env_values_keep_defaults(monkeypatch):
    monkeypatch.setenv("COSMIC_START_YEAR", "")
    monkeypatch.delenv("COSMIC_END_YEAR", raising=False)
    assert FetchSettings.from_env().start_year == 1960


def test_end_before_start_rejected():
    with pytest.raises(ValueError, match="precedes"):
        FetchSettings(start_year=2000, end_year=1999)


def test_zero_batch_size_rejected():
    with pytest.raises(ValueError):
        FetchSettings(batch_size=0)
