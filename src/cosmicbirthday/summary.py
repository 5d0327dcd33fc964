"""Database summary — coverage, breakdowns, and completeness of a Dataset."""

from collections import Counter
from dataclasses import dataclass

from cosmicbirthday.classify import short_eclipse_type
from cosmicbirthday.models import PHASE_NAMES, Dataset


@dataclass(frozen=True)
class DatabaseSummary:
    start_year: int
    end_year: int
    successful_years: int
    total_phases: int
    phase_breakdown: dict[str, int]
    solar_types: dict[str, int]
    lunar_types: dict[str, int]
    missing_moon_years: tuple[int, ...]
    eclipse_years_covered: int

    @property
    def total_years(self) -> int:
        return self.end_year - self.start_year + 1

    @property
    def total_solar(self) -> int:
        return sum(self.solar_types.values())

    @property
    def total_lunar(self) -> int:
        return sum(self.lunar_types.values())

    @property
    def total_events(self) -> int:
        return self.total_phases + self.total_solar + self.total_lunar

    @property
    def success_rate(self) -> float:
        return 100.0 * self.successful_years / self.total_years


def summarize(dataset: Dataset) -> DatabaseSummary:
    years = sorted(dataset.moon_phases)
    start_year = int(dataset.metadata.get("startYear") or (years[0] if years else 0))
    end_year = int(dataset.metadata.get("endYear") or (years[-1] if years else 0))

    phases: Counter[str] = Counter({name: 0 for name in PHASE_NAMES})
    successful = 0
    for record in dataset.moon_phases.values():
        if not record.success:
            continue
        successful += 1
        phases.update(p.phase for p in record.phases)

    missing = tuple(
        year
        for year in range(start_year, end_year + 1)
        if year not in dataset.moon_phases or not dataset.moon_phases[year].success
    )
    solar = Counter(
        short_eclipse_type(e.description, "solar") for e in dataset.solar_eclipses
    )
    lunar = Counter(
        short_eclipse_type(e.description, "lunar") for e in dataset.lunar_eclipses
    )
    eclipse_years = {e.year for e in dataset.solar_eclipses} | {
        e.year for e in dataset.lunar_eclipses
    }
    return DatabaseSummary(
        start_year=start_year,
        end_year=end_year,
        successful_years=successful,
        total_phases=dataset.total_phases,
        phase_breakdown=dict(phases),
        solar_types=dict(solar),
        lunar_types=dict(lunar),
        missing_moon_years=missing,
        eclipse_years_covered=len(eclipse_years),
    )


def format_summary(summary: DatabaseSummary) -> str:
    """Plain-text report for the terminal."""
    rule = "=" * 50
    lines = [
        "🌌 COSMIC BIRTHDAY FINDER - DATABASE SUMMARY",
        rule,
        "",
        "🌙 MOON PHASE DATA:",
        f"   Coverage: {summary.start_year} - {summary.end_year}",
        f"   Total Years: {summary.total_years}",
        f"   Success Rate: {summary.successful_years}/{summary.total_years}"
        f" ({summary.success_rate:.1f}%)",
        f"   Total Moon Phases: {summary.total_phases:,}",
        "",
        "   Phase Breakdown:",
    ]
    lines += [
        f"     {name}: {count:,}" for name, count in summary.phase_breakdown.items() if count
    ]
    lines += ["", "☀️ ECLIPSE DATA:", f"   Solar Eclipses: {summary.total_solar}"]
    lines += [f"     {t}: {n}" for t, n in sorted(summary.solar_types.items())]
    lines += [f"   Lunar Eclipses: {summary.total_lunar}"]
    lines += [f"     {t}: {n}" for t, n in sorted(summary.lunar_types.items())]

    lines += ["", "🔍 DATA COMPLETENESS CHECK:"]
    if not summary.missing_moon_years:
        lines.append(
            f"   ✅ Moon Phase Data: Complete (all years {summary.start_year}-{summary.end_year})"
        )
    else:
        lines.append(
            f"   ⚠️  Moon Phase Data: Missing {len(summary.missing_moon_years)} years"
        )
        if len(summary.missing_moon_years) <= 10:
            lines.append(
                "      Missing years: "
                + ", ".join(str(y) for y in summary.missing_moon_years)
            )
    coverage = 100.0 * summary.eclipse_years_covered / summary.total_years
    lines.append(
        f"   ✅ Eclipse Data: Covers {summary.eclipse_years_covered}/{summary.total_years}"
        f" years ({coverage:.1f}%)"
    )

    lines += [
        "",
        "🎉 FINAL SUMMARY:",
        rule,
        f"⭐ Total Astronomical Events: {summary.total_events:,}",
        f"🎯 Average Events per Year: {summary.total_events / summary.total_years:.0f}",
    ]
    return "\n".join(lines)
