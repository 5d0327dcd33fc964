"""Pipeline settings. Defaults mirror the public endpoints; every value can be overridden from the environment."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

_ROOT = Path(__file__).parent.parent.parent

_BROWSER_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw in (None, ""):
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class FetchSettings:
    """Every tunable of the fetch pipeline."""

    start_year: int = 1960
    end_year: int = 2100
    batch_size: int = 5
    batch_delay: float = 5.0  # seconds between batches
    request_timeout: float = 30.0
    catalog_timeout: float = 45.0
    catalog_delay: float = 3.0  # seconds between NASA catalog pages
    output_dir: Path = _ROOT / "data"
    ephemeris_dir: Path = _ROOT / "resources"
    user_agent: str = _BROWSER_UA
    imcce_enabled: bool = True
    moon_phases_url: str = "https://aa.usno.navy.mil/api/moon/phases/year?year={year}"
    solar_eclipse_url: str = (
        "https://api.imcce.fr/webservices/miriade/ephemeris_solar_eclipse.php?year={year}"
    )
    lunar_eclipse_url: str = (
        "https://api.imcce.fr/webservices/miriade/ephemeris_lunar_eclipse.php?year={year}"
    )
    solar_catalog_urls: tuple[str, ...] = field(
        default=(
            "https://eclipse.gsfc.nasa.gov/SEcat5/SE2001-2100.html",
            "https://eclipse.gsfc.nasa.gov/SEcat5/SE1901-2000.html",
        )
    )
    lunar_catalog_urls: tuple[str, ...] = field(
        default=(
            "https://eclipse.gsfc.nasa.gov/LEcat5/LE2001-2100.html",
            "https://eclipse.gsfc.nasa.gov/LEcat5/LE1901-2000.html",
        )
    )

    def __post_init__(self) -> None:
        if self.end_year < self.start_year:
            raise ValueError(
                f"end_year {self.end_year} precedes start_year {self.start_year}"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @property
    def years(self) -> list[int]:
        return list(range(self.start_year, self.end_year + 1))

    @property
    def coverage(self) -> str:
        return f"{self.start_year}-{self.end_year}"

    @classmethod
    def from_env(cls) -> "FetchSettings":
        """Build settings from ``COSMIC_*`` environment variables.

        Call ``load_dotenv()`` first so a local ``.env`` file is honoured.
        """
        base = cls()
        return replace(
            base,
            start_year=_env_int("COSMIC_START_YEAR", base.start_year),
            end_year=_env_int("COSMIC_END_YEAR", base.end_year),
            batch_size=_env_int("COSMIC_BATCH_SIZE", base.batch_size),
            batch_delay=_env_float("COSMIC_BATCH_DELAY", base.batch_delay),
            request_timeout=_env_float("COSMIC_REQUEST_TIMEOUT", base.request_timeout),
            catalog_timeout=_env_float("COSMIC_CATALOG_TIMEOUT", base.catalog_timeout),
            catalog_delay=_env_float("COSMIC_CATALOG_DELAY", base.catalog_delay),
            output_dir=Path(os.environ.get("COSMIC_OUTPUT_DIR") or base.output_dir),
            ephemeris_dir=Path(
                os.environ.get("COSMIC_EPHEMERIS_DIR") or base.ephemeris_dir
            ),
            user_agent=os.environ.get("COSMIC_USER_AGENT") or base.user_agent,
            imcce_enabled=_env_bool("COSMIC_IMCCE_ENABLED", base.imcce_enabled),
        )
