"""JSON persistence for datasets and progress checkpoints."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pytz import utc

from cosmicbirthday.models import Dataset

logger = logging.getLogger(__name__)

MOON_CHECKPOINT = "moon-data-progress.json"
ECLIPSE_CHECKPOINT = "eclipse-data-progress.json"
MASTER_FILE = "cosmic-database-complete.json"
PARTIAL_FILE = "cosmic-database-partial.json"


class DatasetError(Exception):
    """A dataset file is missing or unreadable."""


def utc_timestamp() -> str:
    return datetime.now(utc).isoformat()


def moon_file(start_year: int, end_year: int) -> str:
    return f"moon-phases-{start_year}-{end_year}.json"


def eclipse_file(start_year: int, end_year: int) -> str:
    return f"eclipse-data-{start_year}-{end_year}.json"


def write_json(path: Path, payload: dict[str, Any]) -> Path:
    """Write payload as pretty-printed JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    size_mb = path.stat().st_size / 1024 / 1024
    logger.info("Saved %s (%.2f MB)", path, size_mb)
    return path


def read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object from path.

    Raises:
        DatasetError: The file is missing, not JSON, or not an object.
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DatasetError(f"Dataset not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise DatasetError(f"Expected a JSON object in {path}")
    return data


def read_checkpoint(path: Path) -> dict[str, Any] | None:
    """Return the checkpoint payload, or None when there is nothing to resume."""
    if not path.is_file():
        return None
    try:
        return read_json(path)
    except DatasetError as e:
        logger.warning("Ignoring unreadable checkpoint: %s", e)
        return None


def load_dataset(path: Path) -> Dataset:
    """Load a master file, or a moon/eclipse file on its own."""
    return Dataset.from_dict(read_json(path))


def load_split_dataset(moon_path: Path, eclipse_path: Path) -> Dataset:
    """Combine the separate moon-phase and eclipse files into one Dataset."""
    moon = read_json(moon_path)
    eclipses = read_json(eclipse_path)
    metadata = {**eclipses.get("metadata", {}), **moon.get("metadata", {})}
    metadata["totalSolarEclipses"] = len(eclipses.get("solarEclipses") or ())
    metadata["totalLunarEclipses"] = len(eclipses.get("lunarEclipses") or ())
    return Dataset.from_dict(
        {
            "metadata": metadata,
            "moonPhases": moon.get("moonPhases") or {},
            "solarEclipses": eclipses.get("solarEclipses") or [],
            "lunarEclipses": eclipses.get("lunarEclipses") or [],
        }
    )


def find_dataset(output_dir: Path, start_year: int, end_year: int) -> Dataset:
    """Locate the best available persisted dataset under output_dir.

    Prefers the master file, then the separate moon + eclipse files.

    Raises:
        DatasetError: Nothing usable was found.
    """
    master = output_dir / MASTER_FILE
    if master.is_file():
        return load_dataset(master)
    moon = output_dir / moon_file(start_year, end_year)
    eclipses = output_dir / eclipse_file(start_year, end_year)
    if moon.is_file() and eclipses.is_file():
        return load_split_dataset(moon, eclipses)
    if moon.is_file():
        return load_dataset(moon)
    raise DatasetError(f"No cosmic dataset under {output_dir}")
