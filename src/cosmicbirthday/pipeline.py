"""Batch fetch pipeline — year batches, progress checkpoints, merged datasets.

Run state lives in the values these functions pass around and return; nothing
here keeps module-level mutable state.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

import httpx

from cosmicbirthday.calculate import SAROS_SOURCE, calculate_eclipses
from cosmicbirthday.config import FetchSettings
from cosmicbirthday.fetchers import (
    IMCCE_SOURCE,
    NASA_SOURCE,
    USNO_SOURCE,
    Sleep,
    fetch_catalog_eclipses,
    fetch_lunar_eclipses_year,
    fetch_moon_phases_year,
    fetch_solar_eclipses_year,
)
from cosmicbirthday.merge import merge_eclipses
from cosmicbirthday.models import Dataset, EclipseYearRecord, YearRecord
from cosmicbirthday.storage import (
    ECLIPSE_CHECKPOINT,
    MASTER_FILE,
    MOON_CHECKPOINT,
    PARTIAL_FILE,
    eclipse_file,
    moon_file,
    read_checkpoint,
    utc_timestamp,
    write_json,
)

logger = logging.getLogger(__name__)

DATASET_VERSION = "1.0.0"


class Outcome(Protocol):
    year: int

    @property
    def success(self) -> bool: ...


T = TypeVar("T", bound=Outcome)


@dataclass
class FetchTally:
    """Running count of years handled by the orchestrator."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        return 100.0 * self.succeeded / self.processed if self.processed else 0.0


@dataclass(frozen=True)
class EclipseYear:
    """Both per-year eclipse endpoints for one year."""

    year: int
    solar: EclipseYearRecord
    lunar: EclipseYearRecord

    @property
    def success(self) -> bool:
        return self.solar.success and self.lunar.success


async def run_in_batches(
    years: Sequence[int],
    fetch_year: Callable[[int], Awaitable[T]],
    *,
    batch_size: int,
    batch_delay: float,
    on_batch: Callable[[dict[int, T], FetchTally], None] | None = None,
    sleep: Sleep = asyncio.sleep,
) -> tuple[dict[int, T], FetchTally]:
    """Fetch every year, batch_size at a time.

    Years in one batch run concurrently. A year whose fetcher raises is logged
    and counted as failed; the batch and the run continue. After each batch
    on_batch receives that batch's results and the tally, then the loop sleeps
    batch_delay seconds unless it was the last batch.

    Args:
        years: Years to process. Duplicates are processed once.
        fetch_year: Coroutine function returning an outcome with ``success``.
        batch_size: Years per batch (>= 1).
        batch_delay: Seconds between batches.
        on_batch: Progress hook, typically writing a checkpoint.
        sleep: Awaitable delay, injectable for tests.

    Returns:
        (results keyed by year, final tally). Years whose fetcher raised are
        absent from the results.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    ordered = list(dict.fromkeys(years))
    results: dict[int, T] = {}
    tally = FetchTally()

    for offset in range(0, len(ordered), batch_size):
        batch = ordered[offset : offset + batch_size]
        logger.info("Processing batch: %d - %d", batch[0], batch[-1])
        outcomes = await asyncio.gather(
            *(fetch_year(year) for year in batch), return_exceptions=True
        )

        batch_results: dict[int, T] = {}
        for year, outcome in zip(batch, outcomes):
            tally.processed += 1
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("✗ Year %d: %s", year, outcome, exc_info=outcome)
                tally.failed += 1
                continue
            batch_results[year] = outcome
            if outcome.success:
                tally.succeeded += 1
            else:
                tally.failed += 1
        results.update(batch_results)

        logger.info(
            "Batch complete. Progress: %d/%d (%.1f%%) Success: %d, Errors: %d",
            tally.processed,
            len(ordered),
            100.0 * tally.processed / len(ordered),
            tally.succeeded,
            tally.failed,
        )
        if on_batch is not None:
            on_batch(batch_results, tally)
        if offset + batch_size < len(ordered):
            logger.info("Waiting %g seconds before next batch...", batch_delay)
            await sleep(batch_delay)

    return results, tally


_BAD_ENTRY = (KeyError, TypeError, ValueError, AttributeError)


def _checkpoint_entries(checkpoint: dict[str, Any], key: str) -> list[Any]:
    entries = checkpoint.get(key)
    if not isinstance(entries, dict):
        if entries is not None:
            logger.warning("Ignoring checkpoint %r: expected an object", key)
        return []
    return list(entries.values())


def _resumed_moon_records(settings: FetchSettings) -> dict[int, YearRecord]:
    checkpoint = read_checkpoint(settings.output_dir / MOON_CHECKPOINT)
    if checkpoint is None:
        return {}
    wanted = set(settings.years)
    records = {}
    for raw in _checkpoint_entries(checkpoint, "moonPhases"):
        try:
            record = YearRecord.from_dict(raw)
        except _BAD_ENTRY as e:
            logger.warning("Ignoring malformed moon checkpoint entry: %r (%s)", raw, e)
            continue
        if record.success and record.year in wanted:
            records[record.year] = record
    return records


def _resumed_eclipse_years(settings: FetchSettings) -> dict[int, EclipseYear]:
    checkpoint = read_checkpoint(settings.output_dir / ECLIPSE_CHECKPOINT)
    if checkpoint is None:
        return {}
    wanted = set(settings.years)
    years = {}
    for raw in _checkpoint_entries(checkpoint, "eclipsesByYear"):
        try:
            entry = EclipseYear(
                year=int(raw["year"]),
                solar=EclipseYearRecord.from_dict(raw["solar"]),
                lunar=EclipseYearRecord.from_dict(raw["lunar"]),
            )
        except _BAD_ENTRY as e:
            logger.warning("Ignoring malformed eclipse checkpoint entry: %r (%s)", raw, e)
            continue
        if entry.success and entry.year in wanted:
            years[entry.year] = entry
    return years


def _moon_metadata(
    settings: FetchSettings, records: dict[int, YearRecord], generated_at: str
) -> dict[str, Any]:
    successful = sum(1 for r in records.values() if r.success)
    return {
        "title": f"Comprehensive Moon Phase Data {settings.coverage}",
        "source": USNO_SOURCE,
        "generatedAt": generated_at,
        "startYear": settings.start_year,
        "endYear": settings.end_year,
        "totalYears": len(settings.years),
        "processed": len(records),
        "successful": successful,
        "failed": len(settings.years) - successful,
        "totalPhases": sum(r.count for r in records.values() if r.success),
    }


async def build_moon_dataset(
    client: httpx.AsyncClient,
    settings: FetchSettings,
    *,
    resume: bool = False,
    sleep: Sleep = asyncio.sleep,
) -> Dataset:
    """Fetch USNO moon phases for every configured year and persist them.

    A checkpoint is written after every batch. With resume=True the
    successful years of the last checkpoint are kept and not fetched again.
    """
    generated_at = utc_timestamp()
    records = _resumed_moon_records(settings) if resume else {}
    if records:
        logger.info("Resuming: %d years already fetched", len(records))
    pending = [year for year in settings.years if year not in records]

    logger.info(
        "🌙 Moon phases %s: %d years to fetch", settings.coverage, len(pending)
    )
    checkpoint_path = settings.output_dir / MOON_CHECKPOINT

    def checkpoint(batch: dict[int, YearRecord], tally: FetchTally) -> None:
        records.update(batch)
        payload = Dataset(
            metadata=_moon_metadata(settings, records, generated_at),
            moon_phases=records,
        ).to_dict()
        write_json(checkpoint_path, _moon_only(payload))

    _, tally = await run_in_batches(
        pending,
        lambda year: fetch_moon_phases_year(client, year, settings),
        batch_size=settings.batch_size,
        batch_delay=settings.batch_delay,
        on_batch=checkpoint,
        sleep=sleep,
    )

    metadata = _moon_metadata(settings, records, generated_at)
    metadata["completedAt"] = utc_timestamp()
    dataset = Dataset(metadata=metadata, moon_phases=dict(records))
    write_json(
        settings.output_dir / moon_file(settings.start_year, settings.end_year),
        _moon_only(dataset.to_dict()),
    )
    logger.info(
        "Moon phases done: %d phases, %d/%d years (this run: %d ok, %d failed)",
        metadata["totalPhases"],
        metadata["successful"],
        metadata["totalYears"],
        tally.succeeded,
        tally.failed,
    )
    return dataset


def _moon_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {"metadata": payload["metadata"], "moonPhases": payload["moonPhases"]}


async def _fetch_eclipse_year(
    client: httpx.AsyncClient, year: int, settings: FetchSettings
) -> EclipseYear:
    solar, lunar = await asyncio.gather(
        fetch_solar_eclipses_year(client, year, settings),
        fetch_lunar_eclipses_year(client, year, settings),
    )
    return EclipseYear(year=year, solar=solar, lunar=lunar)


async def _fetch_imcce_years(
    client: httpx.AsyncClient,
    settings: FetchSettings,
    resume: bool,
    sleep: Sleep,
) -> dict[int, EclipseYear]:
    years = _resumed_eclipse_years(settings) if resume else {}
    if years:
        logger.info("Resuming: %d eclipse years already fetched", len(years))
    pending = [year for year in settings.years if year not in years]
    checkpoint_path = settings.output_dir / ECLIPSE_CHECKPOINT

    def checkpoint(batch: dict[int, EclipseYear], tally: FetchTally) -> None:
        years.update(batch)
        write_json(
            checkpoint_path,
            {
                "metadata": {
                    "source": IMCCE_SOURCE,
                    "startYear": settings.start_year,
                    "endYear": settings.end_year,
                    "processed": len(years),
                    "updatedAt": utc_timestamp(),
                },
                "eclipsesByYear": {
                    str(y): {
                        "year": y,
                        "solar": e.solar.to_dict(),
                        "lunar": e.lunar.to_dict(),
                    }
                    for y, e in sorted(years.items())
                },
            },
        )

    await run_in_batches(
        pending,
        lambda year: _fetch_eclipse_year(client, year, settings),
        batch_size=settings.batch_size,
        batch_delay=settings.batch_delay,
        on_batch=checkpoint,
        sleep=sleep,
    )
    return years


async def build_eclipse_dataset(
    client: httpx.AsyncClient,
    settings: FetchSettings,
    *,
    resume: bool = False,
    sleep: Sleep = asyncio.sleep,
) -> Dataset:
    """Collect solar and lunar eclipses from every source, merge, and persist.

    Source precedence when merging: NASA catalog, then the per-year IMCCE
    endpoint (if enabled), then the Saros calculation.
    """
    generated_at = utc_timestamp()
    logger.info("🌒 Eclipses %s: NASA catalogs", settings.coverage)
    nasa_solar = await fetch_catalog_eclipses(client, "solar", settings, sleep)
    nasa_lunar = await fetch_catalog_eclipses(client, "lunar", settings, sleep)

    imcce_solar = []
    imcce_lunar = []
    imcce_failures = 0
    sources = [NASA_SOURCE]
    if settings.imcce_enabled:
        logger.info("🌒 Eclipses %s: per-year IMCCE endpoints", settings.coverage)
        sources.append(IMCCE_SOURCE)
        for entry in (await _fetch_imcce_years(client, settings, resume, sleep)).values():
            imcce_solar.extend(entry.solar.eclipses)
            imcce_lunar.extend(entry.lunar.eclipses)
            imcce_failures += entry.solar.parse_failures + entry.lunar.parse_failures
    sources.append(SAROS_SOURCE)

    calculated_solar = calculate_eclipses(settings.start_year, settings.end_year, "solar")
    calculated_lunar = calculate_eclipses(settings.start_year, settings.end_year, "lunar")
    logger.info(
        "Calculated %d solar and %d lunar eclipses",
        len(calculated_solar),
        len(calculated_lunar),
    )

    solar = merge_eclipses(nasa_solar.records, imcce_solar, calculated_solar)
    lunar = merge_eclipses(nasa_lunar.records, imcce_lunar, calculated_lunar)

    metadata = {
        "title": f"Comprehensive Eclipse Data {settings.coverage}",
        "sources": sources,
        "generatedAt": generated_at,
        "startYear": settings.start_year,
        "endYear": settings.end_year,
        "totalYears": len(settings.years),
        "catalogSolarEclipses": len(nasa_solar.records),
        "catalogLunarEclipses": len(nasa_lunar.records),
        "parseFailures": len(nasa_solar.failures) + len(nasa_lunar.failures) + imcce_failures,
        "totalSolarEclipses": len(solar),
        "totalLunarEclipses": len(lunar),
        "totalEclipses": len(solar) + len(lunar),
        "completedAt": utc_timestamp(),
    }
    dataset = Dataset(
        metadata=metadata, solar_eclipses=tuple(solar), lunar_eclipses=tuple(lunar)
    )
    payload = dataset.to_dict()
    del payload["moonPhases"]
    write_json(
        settings.output_dir / eclipse_file(settings.start_year, settings.end_year),
        payload,
    )
    logger.info(
        "☀️ Solar: %d  🌙 Lunar: %d  (%d unparsed lines)",
        len(solar),
        len(lunar),
        metadata["parseFailures"],
    )
    return dataset


def combine_datasets(
    moon: Dataset, eclipses: Dataset, settings: FetchSettings
) -> Dataset:
    """Master dataset from a moon-phase dataset and an eclipse dataset."""
    total_phases = moon.total_phases
    total_solar = len(eclipses.solar_eclipses)
    total_lunar = len(eclipses.lunar_eclipses)
    metadata = {
        "title": "Complete Cosmic Birthday Database",
        "description": "Moon phases and eclipses for the Cosmic Birthday Finder",
        "coverage": f"{settings.coverage} ({len(settings.years)} years)",
        "startYear": settings.start_year,
        "endYear": settings.end_year,
        "totalYears": len(settings.years),
        "dataTypes": ["moonPhases", "solarEclipses", "lunarEclipses"],
        "sources": [USNO_SOURCE, *eclipses.metadata.get("sources", [])],
        "generatedAt": moon.metadata.get("generatedAt") or utc_timestamp(),
        "version": DATASET_VERSION,
        "processed": moon.metadata.get("processed", len(moon.moon_phases)),
        "successful": moon.metadata.get("successful", 0),
        "failed": moon.metadata.get("failed", 0),
        "parseFailures": eclipses.metadata.get("parseFailures", 0),
        "totalPhases": total_phases,
        "totalMoonPhases": total_phases,
        "totalSolarEclipses": total_solar,
        "totalLunarEclipses": total_lunar,
        "totalEclipses": total_solar + total_lunar,
        "totalEvents": total_phases + total_solar + total_lunar,
        "completedAt": utc_timestamp(),
    }
    return Dataset(
        metadata=metadata,
        moon_phases=moon.moon_phases,
        solar_eclipses=eclipses.solar_eclipses,
        lunar_eclipses=eclipses.lunar_eclipses,
    )


async def build_cosmic_database(
    client: httpx.AsyncClient,
    settings: FetchSettings,
    *,
    resume: bool = False,
    sleep: Sleep = asyncio.sleep,
) -> Dataset:
    """Moon phases, then eclipses, then the master file.

    Any failure past the per-year level is fatal: whatever was built so far is
    saved to the partial file and the exception propagates.
    """
    moon: Dataset | None = None
    eclipses: Dataset | None = None
    try:
        logger.info("📅 STEP 1: moon phases")
        moon = await build_moon_dataset(client, settings, resume=resume, sleep=sleep)
        logger.info("🌒 STEP 2: eclipses")
        eclipses = await build_eclipse_dataset(
            client, settings, resume=resume, sleep=sleep
        )
        logger.info("🔧 STEP 3: master database")
        master = combine_datasets(moon, eclipses, settings)
        write_json(settings.output_dir / MASTER_FILE, master.to_dict())
        return master
    except Exception:
        logger.exception("💥 Cosmic database build failed")
        if moon is not None or eclipses is not None:
            _save_partial(settings, moon, eclipses)
        raise


def _save_partial(
    settings: FetchSettings, moon: Dataset | None, eclipses: Dataset | None
) -> None:
    partial = {
        "metadata": {
            "title": "Partial Cosmic Birthday Database",
            "startYear": settings.start_year,
            "endYear": settings.end_year,
            "savedAt": utc_timestamp(),
        },
        "moonPhases": moon.to_dict()["moonPhases"] if moon is not None else None,
        "solarEclipses": (
            eclipses.to_dict()["solarEclipses"] if eclipses is not None else None
        ),
        "lunarEclipses": (
            eclipses.to_dict()["lunarEclipses"] if eclipses is not None else None
        ),
    }
    try:
        path = write_json(settings.output_dir / PARTIAL_FILE, partial)
    except OSError as e:
        logger.error("Could not save partial data: %s", e)
        return
    logger.info("💾 Partial data saved to: %s", path)
