"""Merge eclipse lists from several sources into one chronological list."""

from collections.abc import Callable, Hashable, Iterable

from cosmicbirthday.models import EclipseRecord


def _dedupe(
    records: Iterable[EclipseRecord], key: Callable[[EclipseRecord], Hashable]
) -> list[EclipseRecord]:
    seen: set[Hashable] = set()
    unique: list[EclipseRecord] = []
    for record in records:
        k = key(record)
        if k in seen:
            continue
        seen.add(k)
        unique.append(record)
    return unique


def merge_eclipses(*sources: Iterable[EclipseRecord]) -> list[EclipseRecord]:
    """Concatenate sources, keep the first record per (year, month), sort by year.

    Earlier sources win, so pass the most trusted one first. The day is not
    part of the key, so two eclipses in the same month collapse into one.
    """
    combined = [record for source in sources for record in source]
    unique = _dedupe(combined, key=lambda e: (e.year, e.month))
    return sorted(unique, key=lambda e: e.year)


def dedupe_exact(records: Iterable[EclipseRecord]) -> list[EclipseRecord]:
    """Drop records repeating an earlier (year, month, day)."""
    return _dedupe(records, key=lambda e: (e.year, e.month, e.day))
