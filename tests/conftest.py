from __future__ import annotations

import json

import httpx
import pytest

from cosmicbirthday.config import FetchSettings
from cosmicbirthday.models import Dataset, EclipseRecord, MoonPhase, YearRecord


def make_phase(**overrides) -> MoonPhase:
    fields = {"year": 1999, "month": 8, "day": 11, "phase": "New Moon", "time": "11:08"}
    fields.update(overrides)
    return MoonPhase(**fields)


def make_eclipse(**overrides) -> EclipseRecord:
    fields = {
        "year": 2024,
        "month": 4,
        "day": 8,
        "type": "solar",
        "description": "2024 Apr 08   T   Total eclipse",
        "source": "NASA Eclipse Catalog",
    }
    fields.update(overrides)
    return EclipseRecord(**fields)


def make_dataset(**overrides) -> Dataset:
    fields = {
        "metadata": {"startYear": 1999, "endYear": 2030, "sources": ["test"]},
        "moon_phases": {},
        "solar_eclipses": (),
        "lunar_eclipses": (),
    }
    fields.update(overrides)
    return Dataset(**fields)


def usno_body(year: int, entries: list[tuple[int, int, str]] | None = None) -> str:
    """USNO-shaped JSON body. Entries are (month, day, phase)."""
    if entries is None:
        entries = [(1, 6, "New Moon"), (1, 13, "First Quarter"), (1, 21, "Full Moon")]
    return json.dumps(
        {
            "year": year,
            "numphases": len(entries),
            "phasedata": [
                {"year": year, "month": m, "day": d, "phase": p, "time": "12:00"}
                for m, d, p in entries
            ],
        }
    )


def year_record(year: int, entries: list[tuple[int, int, str]]) -> YearRecord:
    return YearRecord(
        year=year,
        success=True,
        phases=tuple(make_phase(year=year, month=m, day=d, phase=p) for m, d, p in entries),
    )


@pytest.fixture
def settings(tmp_path) -> FetchSettings:
    return FetchSettings(
        start_year=2020,
        end_year=2024,
        batch_size=2,
        batch_delay=0.0,
        catalog_delay=0.0,
        output_dir=tmp_path / "data",
        ephemeris_dir=tmp_path / "resources",
    )


@pytest.fixture
def no_sleep():
    """Records requested delays instead of sleeping."""
    calls: list[float] = []

    async def sleep(seconds: float) -> None:
        calls.append(seconds)

    sleep.calls = calls
    return sleep


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
