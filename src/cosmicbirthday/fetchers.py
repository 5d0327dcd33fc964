"""Per-year and per-catalog fetchers.

Per-year fetchers never raise for request or parse problems: they return a
record with ``success=False`` and the error message, so a batch can carry on.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from cosmicbirthday.config import FetchSettings
from cosmicbirthday.fetch import FetchError, fetch_text
from cosmicbirthday.models import EclipseCategory, EclipseYearRecord, YearRecord
from cosmicbirthday.parsing import CatalogParse, parse_catalog, parse_usno_phases

logger = logging.getLogger(__name__)

USNO_SOURCE = "USNO Naval Observatory API"
IMCCE_SOURCE = "IMCCE Miriade"
NASA_SOURCE = "NASA Eclipse Catalog"

Sleep = Callable[[float], Awaitable[None]]


async def fetch_moon_phases_year(
    client: httpx.AsyncClient, year: int, settings: FetchSettings
) -> YearRecord:
    """Moon phases of one year from the USNO API."""
    url = settings.moon_phases_url.format(year=year)
    try:
        body = await fetch_text(client, url, timeout=settings.request_timeout)
    except FetchError as e:
        logger.warning("✗ Year %d: %s", year, e)
        return YearRecord(year=year, success=False, error=str(e))

    record = parse_usno_phases(body, year)
    if record.success:
        logger.info("✓ Year %d: %d moon phases", year, record.count)
    else:
        logger.warning("✗ Year %d: %s", year, record.error)
    return record


async def fetch_eclipses_year(
    client: httpx.AsyncClient,
    year: int,
    category: EclipseCategory,
    settings: FetchSettings,
) -> EclipseYearRecord:
    """Eclipses of one category and year from the IMCCE endpoint."""
    template = (
        settings.solar_eclipse_url if category == "solar" else settings.lunar_eclipse_url
    )
    url = template.format(year=year)
    try:
        body = await fetch_text(client, url, timeout=settings.request_timeout)
    except FetchError as e:
        logger.warning("✗ %s eclipses %d: %s", category.capitalize(), year, e)
        return EclipseYearRecord(year=year, category=category, success=False, error=str(e))

    # The endpoint is keyed by year; dates outside it are noise.
    parsed = parse_catalog(body, category, year, year, IMCCE_SOURCE)
    return EclipseYearRecord(
        year=year,
        category=category,
        success=True,
        eclipses=parsed.records,
        parse_failures=len(parsed.failures),
    )


async def fetch_solar_eclipses_year(
    client: httpx.AsyncClient, year: int, settings: FetchSettings
) -> EclipseYearRecord:
    return await fetch_eclipses_year(client, year, "solar", settings)


async def fetch_lunar_eclipses_year(
    client: httpx.AsyncClient, year: int, settings: FetchSettings
) -> EclipseYearRecord:
    return await fetch_eclipses_year(client, year, "lunar", settings)


async def fetch_catalog_eclipses(
    client: httpx.AsyncClient,
    category: EclipseCategory,
    settings: FetchSettings,
    sleep: Sleep = asyncio.sleep,
) -> CatalogParse:
    """Scrape every NASA catalog page of a category.

    A page that fails to download is logged and skipped; the pages that did
    load are still returned.
    """
    urls = (
        settings.solar_catalog_urls if category == "solar" else settings.lunar_catalog_urls
    )
    records = []
    failures = []
    for i, url in enumerate(urls):
        if i > 0:
            await sleep(settings.catalog_delay)
        logger.info("Fetching %s eclipses from NASA: %s", category, url)
        try:
            body = await fetch_text(client, url, timeout=settings.catalog_timeout)
        except FetchError as e:
            logger.error("✗ Failed to fetch %s eclipses from %s: %s", category, url, e)
            continue
        parsed = parse_catalog(
            body, category, settings.start_year, settings.end_year, NASA_SOURCE
        )
        logger.info("✓ Found %d %s eclipses", len(parsed.records), category)
        records.extend(parsed.records)
        failures.extend(parsed.failures)
    return CatalogParse(records=tuple(records), failures=tuple(failures))
