"""Offline fallbacks — Saros-cycle eclipse projection and skyfield moon phases.

Neither is an ephemeris-grade eclipse prediction. The Saros projection only
shifts a handful of known eclipses by whole cycles.
"""

import functools
import logging
from datetime import datetime
from pathlib import Path

from pytz import utc
from skyfield import almanac
from skyfield.api import Loader

from cosmicbirthday.merge import dedupe_exact
from cosmicbirthday.models import (
    Dataset,
    EclipseCategory,
    EclipseRecord,
    MoonPhase,
    YearRecord,
)

logger = logging.getLogger(__name__)

SAROS_YEARS = 18.03  # 223 synodic months
SAROS_SOURCE = "Saros Cycle Calculation"
EPHEMERIS_FILE = "de440s.bsp"  # covers 1849-2150

# Reference eclipses projected along their Saros series.
_REFERENCE_ECLIPSES: dict[str, tuple[tuple[int, int, int], ...]] = {
    "solar": (
        (2024, 4, 8),  # Total
        (2023, 10, 14),  # Annular
        (2021, 6, 10),  # Annular
        (2020, 6, 21),  # Annular
        (2017, 8, 21),  # Total
    ),
    "lunar": (
        (2024, 3, 25),  # Penumbral
        (2023, 5, 5),  # Penumbral
        (2022, 11, 8),  # Total
        (2022, 5, 16),  # Total
        (2021, 11, 19),  # Partial
    ),
}


def _saros_years(ref_year: int, start_year: int, end_year: int) -> list[int]:
    years: list[int] = [ref_year]
    n = 1
    while ref_year - n * SAROS_YEARS >= start_year - 0.5:
        years.append(round(ref_year - n * SAROS_YEARS))
        n += 1
    n = 1
    while ref_year + n * SAROS_YEARS <= end_year + 0.5:
        years.append(round(ref_year + n * SAROS_YEARS))
        n += 1
    # Filter on the rounded year, not the float.
    return [y for y in years if start_year <= y <= end_year]


def calculate_eclipses(
    start_year: int, end_year: int, category: EclipseCategory
) -> list[EclipseRecord]:
    """Project the reference eclipses of a category across [start_year, end_year].

    Returns:
        Records deduplicated on (year, month, day), sorted by year.
    """
    label = "Solar" if category == "solar" else "Lunar"
    eclipses: list[EclipseRecord] = []
    for ref_year, month, day in _REFERENCE_ECLIPSES.get(category, ()):
        for year in _saros_years(ref_year, start_year, end_year):
            eclipses.append(
                EclipseRecord(
                    year=year,
                    month=month,
                    day=day,
                    type=category,
                    description=f"{label} Eclipse (calculated)",
                    source=SAROS_SOURCE,
                )
            )
    return sorted(dedupe_exact(eclipses), key=lambda e: e.year)


@functools.lru_cache(maxsize=None)
def _ephemeris(directory: str):
    loader = Loader(directory)
    return loader, loader(EPHEMERIS_FILE)


def ephemeris_available(ephemeris_dir: Path) -> bool:
    return (Path(ephemeris_dir) / EPHEMERIS_FILE).is_file()


def calculate_moon_phases(year: int, ephemeris_dir: Path) -> YearRecord:
    """The four principal moon phases of a year, computed with skyfield.

    The ephemeris is downloaded into ephemeris_dir on first use.
    """
    loader, eph = _ephemeris(str(ephemeris_dir))
    ts = loader.timescale()
    t0 = ts.utc(year, 1, 1)
    t1 = ts.utc(year + 1, 1, 1)
    times, indices = almanac.find_discrete(t0, t1, almanac.moon_phases(eph))

    phases: list[MoonPhase] = []
    for t, index in zip(times, indices):
        dt = t.utc_datetime()
        phases.append(
            MoonPhase(
                year=dt.year,
                month=dt.month,
                day=dt.day,
                phase=almanac.MOON_PHASES[int(index)],
                time=dt.strftime("%H:%M"),
            )
        )
    return YearRecord(year=year, success=True, phases=tuple(phases))


def calculated_dataset(start_year: int, end_year: int, ephemeris_dir: Path) -> Dataset:
    """A complete Dataset built without any network access beyond the ephemeris download."""
    logger.info("Calculating moon phases %d-%d with skyfield", start_year, end_year)
    moon = {
        year: calculate_moon_phases(year, ephemeris_dir)
        for year in range(start_year, end_year + 1)
    }
    solar = calculate_eclipses(start_year, end_year, "solar")
    lunar = calculate_eclipses(start_year, end_year, "lunar")
    metadata = {
        "title": f"Calculated Cosmic Data {start_year}-{end_year}",
        "coverage": f"{start_year}-{end_year} ({end_year - start_year + 1} years)",
        "startYear": start_year,
        "endYear": end_year,
        "sources": ["skyfield almanac (de440s)", SAROS_SOURCE],
        "generatedAt": datetime.now(utc).isoformat(),
        "totalPhases": sum(r.count for r in moon.values()),
        "totalSolarEclipses": len(solar),
        "totalLunarEclipses": len(lunar),
        "totalEclipses": len(solar) + len(lunar),
    }
    return Dataset(
        metadata=metadata,
        moon_phases=moon,
        solar_eclipses=tuple(solar),
        lunar_eclipses=tuple(lunar),
    )
