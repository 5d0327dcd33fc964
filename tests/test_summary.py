from __future__ import annotations

from conftest import make_dataset, make_eclipse, year_record

from cosmicbirthday.models import YearRecord
from cosmicbirthday.summary import format_summary, summarize


def _dataset():
    return make_dataset(
        metadata={"startYear": 2020, "endYear": 2023},
        moon_phases={
            2020: year_record(2020, [(1, 10, "Full Moon"), (1, 24, "New Moon")]),
            2021: YearRecord(year=2021, success=False, error="HTTP 503: busy"),
            2022: year_record(2022, [(1, 2, "New Moon")]),
        },
        solar_eclipses=(
            make_eclipse(year=2020, description="2020 Jun 21   A   "),
            make_eclipse(year=2022, description="calculated"),
        ),
        lunar_eclipses=(make_eclipse(year=2022, type="lunar", description="2022 Nov 08   T-  "),),
    )


def test_summarize_counts():
    summary = summarize(_dataset())

    assert summary.total_years == 4
    assert summary.successful_years == 2
    assert summary.total_phases == 3
    assert summary.phase_breakdown["New Moon"] == 2
    assert summary.phase_breakdown["First Quarter"] == 0
    assert summary.solar_types == {"Annular": 1, "Unspecified": 1}
    assert summary.lunar_types == {"Total": 1}
    assert summary.missing_moon_years == (2021, 2023)
    assert summary.eclipse_years_covered == 2
    assert summary.total_events == 6
    assert summary.success_rate == 50.0


def test_report_lists_missing_years():
    report = format_summary(summarize(_dataset()))

    assert "Total Years: 4" in report
    assert "Missing 2 years" in report
    assert "Missing years: 2021, 2023" in report
    assert "Annular: 1" in report
    assert "Total Astronomical Events: 6" in report


def test_report_complete_dataset():
    dataset = make_dataset(
        metadata={"startYear": 2020, "endYear": 2020},
        moon_phases={2020: year_record(2020, [(1, 10, "Full Moon")])},
    )
    report = format_summary(summarize(dataset))
    assert "Complete (all years 2020-2020)" in report
