"""Parsers for loosely structured astronomy responses.

Every parser returns a typed result: a record, or a ParseFailure saying what
was rejected and why. Callers count failures instead of losing them.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from cosmicbirthday.models import (
    EclipseCategory,
    EclipseRecord,
    MoonPhase,
    ParsedDate,
    ParseFailure,
    YearRecord,
)

logger = logging.getLogger(__name__)

MONTHS: dict[str, int] = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

_MONTH_NAME_RE = re.compile(r"(\d{4})\s+([A-Za-z]{3})\s+(\d{1,2})")  # "2024 Mar 25"
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")  # "2024-03-25"
_US_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")  # "3/25/2024"


@dataclass(frozen=True)
class CatalogParse:
    """Records recovered from a catalog page, plus the lines that were rejected."""

    records: tuple[EclipseRecord, ...]
    failures: tuple[ParseFailure, ...]


def _checked(text: str, year: int, month: int, day: int) -> ParsedDate | ParseFailure:
    if not 1 <= month <= 12:
        return ParseFailure(text, f"month {month} out of range")
    if not 1 <= day <= 31:
        return ParseFailure(text, f"day {day} out of range")
    return ParsedDate(year=year, month=month, day=day)


def parse_date_text(text: str) -> ParsedDate | ParseFailure:
    """Find the first date-like substring in text.

    Patterns are tried in order: month-name ("2024 Mar 25"), ISO
    ("2024-03-25"), US ("3/25/2024"). The first pattern that matches decides
    the outcome; later patterns are not consulted.
    """
    m = _MONTH_NAME_RE.search(text)
    if m:
        month = MONTHS.get(m.group(2).capitalize())
        if month is None:
            return ParseFailure(text, f"unknown month {m.group(2)!r}")
        return _checked(text, int(m.group(1)), month, int(m.group(3)))

    m = _ISO_RE.search(text)
    if m:
        return _checked(text, int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _US_RE.search(text)
    if m:
        return _checked(text, int(m.group(3)), int(m.group(1)), int(m.group(2)))

    return ParseFailure(text, "no recognizable date")


def parse_catalog(
    text: str,
    category: EclipseCategory,
    start_year: int,
    end_year: int,
    source: str,
) -> CatalogParse:
    """Parse an eclipse catalog (HTML or plain text) line by line.

    Each non-blank line holding a date within [start_year, end_year] becomes an
    EclipseRecord whose description is the stripped line. Everything else is
    reported as a ParseFailure.
    """
    records: list[EclipseRecord] = []
    failures: list[ParseFailure] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        parsed = parse_date_text(line)
        if isinstance(parsed, ParseFailure):
            failures.append(parsed)
            continue
        if not start_year <= parsed.year <= end_year:
            failures.append(ParseFailure(line, "year out of range"))
            continue
        records.append(
            EclipseRecord(
                year=parsed.year,
                month=parsed.month,
                day=parsed.day,
                type=category,
                description=line,
                source=source,
            )
        )
    if failures:
        logger.debug(
            "%s: %d %s lines parsed, %d rejected",
            source,
            len(records),
            category,
            len(failures),
        )
    return CatalogParse(records=tuple(records), failures=tuple(failures))


def parse_phase_entry(entry: Any) -> MoonPhase | ParseFailure:
    """Validate one USNO ``phasedata`` object."""
    if not isinstance(entry, dict):
        return ParseFailure(repr(entry), "phase entry is not an object")
    try:
        year = int(entry["year"])
        month = int(entry["month"])
        day = int(entry["day"])
        phase = str(entry["phase"])
    except (KeyError, TypeError, ValueError) as e:
        return ParseFailure(json.dumps(entry, default=str), f"malformed phase entry: {e}")
    checked = _checked(json.dumps(entry, default=str), year, month, day)
    if isinstance(checked, ParseFailure):
        return checked
    return MoonPhase(
        year=year, month=month, day=day, phase=phase, time=str(entry.get("time", ""))
    )


def parse_usno_phases(body: str, year: int) -> YearRecord:
    """Turn a USNO ``/api/moon/phases/year`` body into a YearRecord.

    A body that is not JSON, or has no ``phasedata`` list, gives an
    unsuccessful record carrying the reason.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        return YearRecord(year=year, success=False, error=f"Invalid JSON: {e}")

    raw_phases = data.get("phasedata") if isinstance(data, dict) else None
    if not raw_phases:
        return YearRecord(year=year, success=False, error="No phase data in response")

    phases: list[MoonPhase] = []
    for entry in raw_phases:
        parsed = parse_phase_entry(entry)
        if isinstance(parsed, ParseFailure):
            logger.debug("Year %d: skipped phase entry (%s)", year, parsed.reason)
            continue
        phases.append(parsed)
    return YearRecord(year=year, success=True, phases=tuple(phases))
