"""Birthday matcher — which years a birthday lands on a moon phase or an eclipse."""

import logging
import re
from datetime import date

from cosmicbirthday.classify import classify_eclipse
from cosmicbirthday.models import BirthdayMatches, Dataset, EclipseMatch, EclipseRecord

logger = logging.getLogger(__name__)

MIN_BIRTH_YEAR = 1900
MAX_BIRTH_YEAR = 2100

# USNO says "Last Quarter"; some sources say "Third Quarter".
_PHASE_BUCKETS: dict[str, str] = {
    "Full Moon": "full_moon",
    "New Moon": "new_moon",
    "First Quarter": "first_quarter",
    "Last Quarter": "last_quarter",
    "Third Quarter": "last_quarter",
}

_ISO_BIRTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")


def parse_birth_date(text: str) -> date:
    """Parse a birth date typed as DD/MM/YYYY (any separators) or YYYY-MM-DD.

    Raises:
        ValueError: Unrecognized format, out-of-range parts, or an impossible date.
    """
    m = _ISO_BIRTH_RE.match(text)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        digits = re.sub(r"\D", "", text)
        if len(digits) != 8:
            raise ValueError(f"Expected DD/MM/YYYY or YYYY-MM-DD, got {text!r}")
        day, month, year = int(digits[:2]), int(digits[2:4]), int(digits[4:])

    if not 1 <= day <= 31:
        raise ValueError(f"Day {day} out of range")
    if not 1 <= month <= 12:
        raise ValueError(f"Month {month} out of range")
    if not MIN_BIRTH_YEAR <= year <= MAX_BIRTH_YEAR:
        raise ValueError(f"Year {year} outside {MIN_BIRTH_YEAR}-{MAX_BIRTH_YEAR}")
    return date(year, month, day)


def _eclipse_matches(
    eclipses: tuple[EclipseRecord, ...], category: str, birth: date
) -> list[EclipseMatch]:
    matches = []
    for eclipse in eclipses:
        if eclipse.year < birth.year:
            continue
        if (eclipse.month, eclipse.day) != (birth.month, birth.day):
            continue
        matches.append(
            EclipseMatch(
                year=eclipse.year,
                type=classify_eclipse(eclipse.description, category),
                category=category.capitalize(),
                date=eclipse.date,
                raw_description=eclipse.description,
            )
        )
    return matches


def find_cosmic_birthdays(birth: date, dataset: Dataset) -> BirthdayMatches:
    """Every moon phase and eclipse on birth's (month, day), from birth.year on.

    Args:
        birth: The user's birth date.
        dataset: Persisted or freshly calculated data.

    Returns:
        Sorted, de-duplicated year lists per phase and the matching eclipses,
        one per (year, type).
    """
    buckets: dict[str, set[int]] = {name: set() for name in set(_PHASE_BUCKETS.values())}
    processed_years = 0
    processed_phases = 0

    for year, record in sorted(dataset.moon_phases.items()):
        if not record.success or year < birth.year:
            continue
        processed_years += 1
        for phase in record.phases:
            processed_phases += 1
            if (phase.month, phase.day) != (birth.month, birth.day):
                continue
            bucket = _PHASE_BUCKETS.get(phase.phase)
            if bucket is None:
                logger.debug("Unknown phase name %r in %d", phase.phase, year)
                continue
            buckets[bucket].add(year)

    eclipse_hits = _eclipse_matches(dataset.solar_eclipses, "solar", birth)
    eclipse_hits += _eclipse_matches(dataset.lunar_eclipses, "lunar", birth)
    seen: set[tuple[int, str]] = set()
    eclipses: list[EclipseMatch] = []
    for hit in sorted(eclipse_hits, key=lambda e: e.year):
        if (hit.year, hit.type) in seen:
            continue
        seen.add((hit.year, hit.type))
        eclipses.append(hit)

    end_year = dataset.metadata.get("endYear") or max(dataset.moon_phases, default=birth.year)
    logger.info(
        "Processed %d years from %d onward, %d phases, %d eclipse matches",
        processed_years,
        birth.year,
        processed_phases,
        len(eclipses),
    )
    return BirthdayMatches(
        full_moon=tuple(sorted(buckets["full_moon"])),
        new_moon=tuple(sorted(buckets["new_moon"])),
        first_quarter=tuple(sorted(buckets["first_quarter"])),
        last_quarter=tuple(sorted(buckets["last_quarter"])),
        eclipses=tuple(eclipses),
        search_range=f"{birth.year} - {end_year}",
        processed_years=processed_years,
        processed_phases=processed_phases,
        data_source=", ".join(dataset.metadata.get("sources") or ())
        or str(dataset.metadata.get("source") or "pre-fetched dataset"),
    )
