"""Command-line entry point.

    cosmic-birthday fetch-all            # build the full database (slow, polite)
    cosmic-birthday fetch-moon --resume  # continue an interrupted moon fetch
    cosmic-birthday summary
    cosmic-birthday find 11/08/1999 --png
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from cosmicbirthday.calculate import calculated_dataset
from cosmicbirthday.config import FetchSettings
from cosmicbirthday.fetch import make_client
from cosmicbirthday.matcher import find_cosmic_birthdays, parse_birth_date
from cosmicbirthday.models import BirthdayMatches, Dataset
from cosmicbirthday.pipeline import (
    build_cosmic_database,
    build_eclipse_dataset,
    build_moon_dataset,
)
from cosmicbirthday.storage import DatasetError, find_dataset, load_dataset
from cosmicbirthday.summary import format_summary, summarize

logger = logging.getLogger(__name__)

_BUILDERS = {
    "fetch-moon": build_moon_dataset,
    "fetch-eclipses": build_eclipse_dataset,
    "fetch-all": build_cosmic_database,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosmic-birthday",
        description="Find the years your birthday falls on a full moon, new moon, or eclipse.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("fetch-moon", "fetch USNO moon phases"),
        ("fetch-eclipses", "fetch and merge eclipse data"),
        ("fetch-all", "fetch everything and write the master database"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--start", type=int, help="first year")
        p.add_argument("--end", type=int, help="last year")
        p.add_argument("--batch-size", type=int)
        p.add_argument("--delay", type=float, help="seconds between batches")
        p.add_argument("--output-dir", type=Path)
        p.add_argument(
            "--resume", action="store_true", help="skip years already in the checkpoint"
        )
        p.add_argument(
            "--no-imcce", action="store_true", help="skip the per-year IMCCE endpoints"
        )

    p = sub.add_parser("summary", help="report on a persisted database")
    p.add_argument("--dataset", type=Path, help="dataset file (default: output dir)")

    p = sub.add_parser("find", help="look up a birthday")
    p.add_argument("birth_date", help="DD/MM/YYYY or YYYY-MM-DD")
    p.add_argument("--dataset", type=Path, help="dataset file (default: output dir)")
    p.add_argument(
        "--calculate",
        action="store_true",
        help="compute phases with skyfield instead of reading a dataset",
    )
    p.add_argument(
        "--png",
        nargs="?",
        const="",
        type=str,
        help="also save a PNG timeline (optional path)",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> FetchSettings:
    """Environment settings with command-line overrides applied."""
    settings = FetchSettings.from_env()
    overrides = {
        "start_year": getattr(args, "start", None),
        "end_year": getattr(args, "end", None),
        "batch_size": getattr(args, "batch_size", None),
        "batch_delay": getattr(args, "delay", None),
        "output_dir": getattr(args, "output_dir", None),
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    if getattr(args, "no_imcce", False):
        settings = replace(settings, imcce_enabled=False)
    return settings


async def _fetch(command: str, settings: FetchSettings, resume: bool) -> Dataset:
    async with make_client(settings) as client:
        return await _BUILDERS[command](client, settings, resume=resume)


def _load(args: argparse.Namespace, settings: FetchSettings) -> Dataset:
    if args.dataset is not None:
        return load_dataset(args.dataset)
    return find_dataset(settings.output_dir, settings.start_year, settings.end_year)


def format_matches(matches: BirthdayMatches) -> str:
    def years(values: tuple[int, ...]) -> str:
        return ", ".join(str(y) for y in values) if values else "none"

    lines = [
        f"🔭 Search range: {matches.search_range}",
        f"🌕 Full Moon: {years(matches.full_moon)}",
        f"🌑 New Moon: {years(matches.new_moon)}",
        f"🌓 First Quarter: {years(matches.first_quarter)}",
        f"🌗 Last Quarter: {years(matches.last_quarter)}",
        "🌒 Eclipses:",
    ]
    if matches.eclipses:
        lines += [f"   {e.year} — {e.description}" for e in matches.eclipses]
    else:
        lines.append("   none")
    lines.append(
        f"({matches.processed_phases:,} phases in {matches.processed_years} years;"
        f" source: {matches.data_source})"
    )
    return "\n".join(lines)


def _find(args: argparse.Namespace, settings: FetchSettings) -> int:
    try:
        birth = parse_birth_date(args.birth_date)
    except ValueError as e:
        print(f"Invalid birth date: {e}", file=sys.stderr)
        return 2

    if args.calculate:
        if birth.year > settings.end_year:
            print(
                f"Birth year {birth.year} is after the last calculated year"
                f" {settings.end_year} (set COSMIC_END_YEAR).",
                file=sys.stderr,
            )
            return 2
        dataset = calculated_dataset(
            max(birth.year, settings.start_year), settings.end_year, settings.ephemeris_dir
        )
    else:
        dataset = _load(args, settings)
    matches = find_cosmic_birthdays(birth, dataset)
    print(format_matches(matches))

    if args.png is not None:
        from cosmicbirthday.renderers.static import save_static_timeline

        path = save_static_timeline(matches, birth, Path(args.png) if args.png else None)
        print(f"Saved: {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = settings_from_args(args)
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    try:
        if args.command in _BUILDERS:
            dataset = asyncio.run(_fetch(args.command, settings, args.resume))
            logger.info("🚀 Done: %s", dataset.metadata.get("title"))
            return 0
        if args.command == "summary":
            print(format_summary(summarize(_load(args, settings))))
            return 0
        return _find(args, settings)
    except DatasetError as e:
        print(f"{e}. Run `cosmic-birthday fetch-all` first.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning(
            "⏹️  Interrupted. Checkpoints kept in %s; rerun with --resume.",
            settings.output_dir,
        )
        return 130
    except Exception:
        logger.exception("💥 Failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
