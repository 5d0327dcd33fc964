"""Data model definitions — explicit boundaries between fetch, persist, and match layers.

JSON files use camelCase keys (the shape the finder UI consumes);
attributes stay snake_case.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

EclipseCategory = Literal["solar", "lunar"]

PHASE_NAMES: tuple[str, ...] = ("New Moon", "First Quarter", "Full Moon", "Last Quarter")


@dataclass(frozen=True)
class ParsedDate:
    """A calendar date recovered from loosely structured text."""

    year: int
    month: int  # 1-12
    day: int

    @property
    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class ParseFailure:
    """Text the parser could not turn into a record, and why."""

    text: str
    reason: str


@dataclass(frozen=True)
class MoonPhase:
    """A single principal moon phase as reported by USNO."""

    year: int
    month: int
    day: int
    phase: str  # "New Moon", "First Quarter", "Full Moon", "Last Quarter"
    time: str  # "HH:MM" UT

    @property
    def date(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "phase": self.phase,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MoonPhase":
        return cls(
            year=int(data["year"]),
            month=int(data["month"]),
            day=int(data["day"]),
            phase=str(data["phase"]),
            time=str(data.get("time", "")),
        )


@dataclass(frozen=True)
class YearRecord:
    """Outcome of one year's moon-phase fetch. Replaced wholesale on re-fetch."""

    year: int
    success: bool
    phases: tuple[MoonPhase, ...] = ()
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.phases)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "year": self.year,
            "success": self.success,
            "phases": [p.to_dict() for p in self.phases],
            "count": self.count,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "YearRecord":
        return cls(
            year=int(data["year"]),
            success=bool(data.get("success")),
            phases=tuple(MoonPhase.from_dict(p) for p in data.get("phases") or ()),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class EclipseRecord:
    """One solar or lunar eclipse, from a catalog, an API, or a calculation."""

    year: int
    month: int
    day: int
    type: EclipseCategory
    description: str
    source: str

    @property
    def date(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "date": self.date,
            "type": self.type,
            "description": self.description,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EclipseRecord":
        return cls(
            year=int(data["year"]),
            month=int(data["month"]),
            day=int(data["day"]),
            type=data["type"],
            description=str(data.get("description") or ""),
            source=str(data.get("source") or ""),
        )


@dataclass(frozen=True)
class EclipseYearRecord:
    """Outcome of one year's request to a per-year eclipse endpoint."""

    year: int
    category: EclipseCategory
    success: bool
    eclipses: tuple[EclipseRecord, ...] = ()
    error: str | None = None
    parse_failures: int = 0

    @property
    def count(self) -> int:
        return len(self.eclipses)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "year": self.year,
            "category": self.category,
            "success": self.success,
            "eclipses": [e.to_dict() for e in self.eclipses],
            "count": self.count,
            "parseFailures": self.parse_failures,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EclipseYearRecord":
        return cls(
            year=int(data["year"]),
            category=data["category"],
            success=bool(data.get("success")),
            eclipses=tuple(EclipseRecord.from_dict(e) for e in data.get("eclipses") or ()),
            error=data.get("error"),
            parse_failures=int(data.get("parseFailures", 0)),
        )


@dataclass(frozen=True)
class Dataset:
    """The consolidated database. Produced by the pipeline, read-only elsewhere."""

    metadata: dict[str, Any]
    moon_phases: dict[int, YearRecord] = field(default_factory=dict)
    solar_eclipses: tuple[EclipseRecord, ...] = ()
    lunar_eclipses: tuple[EclipseRecord, ...] = ()

    @property
    def total_phases(self) -> int:
        return sum(r.count for r in self.moon_phases.values() if r.success)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata,
            "moonPhases": {
                str(year): record.to_dict()
                for year, record in sorted(self.moon_phases.items())
            },
            "solarEclipses": [e.to_dict() for e in self.solar_eclipses],
            "lunarEclipses": [e.to_dict() for e in self.lunar_eclipses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dataset":
        moon = data.get("moonPhases") or {}
        # Accept a whole moon file nested under "moonPhases".
        if "moonPhases" in moon and "metadata" in moon:
            moon = moon["moonPhases"] or {}
        return cls(
            metadata=dict(data.get("metadata") or {}),
            moon_phases={int(y): YearRecord.from_dict(r) for y, r in moon.items()},
            solar_eclipses=tuple(
                EclipseRecord.from_dict(e) for e in data.get("solarEclipses") or ()
            ),
            lunar_eclipses=tuple(
                EclipseRecord.from_dict(e) for e in data.get("lunarEclipses") or ()
            ),
        )


@dataclass(frozen=True)
class EclipseMatch:
    """An eclipse that falls on the user's birthday."""

    year: int
    type: str  # classifier label, e.g. "Total Solar Eclipse"
    category: str  # "Solar" or "Lunar"
    date: str
    raw_description: str

    @property
    def description(self) -> str:
        return f"{self.type} on your birthday"

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "date": self.date,
            "rawDescription": self.raw_description,
        }


@dataclass(frozen=True)
class BirthdayMatches:
    """Every cosmic event on the user's birthday from their birth year onward."""

    full_moon: tuple[int, ...]
    new_moon: tuple[int, ...]
    first_quarter: tuple[int, ...]
    last_quarter: tuple[int, ...]
    eclipses: tuple[EclipseMatch, ...]
    search_range: str
    processed_years: int
    processed_phases: int
    data_source: str

    @property
    def total_events(self) -> int:
        return (
            len(self.full_moon)
            + len(self.new_moon)
            + len(self.first_quarter)
            + len(self.last_quarter)
            + len(self.eclipses)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fullMoon": list(self.full_moon),
            "newMoon": list(self.new_moon),
            "firstQuarter": list(self.first_quarter),
            "lastQuarter": list(self.last_quarter),
            "eclipses": [e.to_dict() for e in self.eclipses],
            "searchRange": self.search_range,
            "processedYears": self.processed_years,
            "processedPhases": self.processed_phases,
            "dataSource": self.data_source,
        }
