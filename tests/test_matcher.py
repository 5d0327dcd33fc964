from __future__ import annotations

from datetime import date

import pytest
from conftest import make_dataset, make_eclipse, year_record

from cosmicbirthday.matcher import find_cosmic_birthdays, parse_birth_date
from cosmicbirthday.models import YearRecord


def test_full_moon_on_birthday_years_later():
    dataset = make_dataset(
        moon_phases={
            1998: year_record(1998, [(8, 11, "Full Moon")]),
            1999: year_record(1999, [(8, 11, "New Moon"), (8, 26, "Full Moon")]),
            2030: year_record(2030, [(8, 11, "Full Moon"), (8, 25, "New Moon")]),
        }
    )

    matches = find_cosmic_birthdays(date(1999, 8, 11), dataset)

    assert matches.full_moon == (2030,)
    assert matches.new_moon == (1999,)
    assert matches.first_quarter == ()
    assert matches.search_range == "1999 - 2030"
    assert matches.processed_years == 2
    assert matches.processed_phases == 4


def test_third_quarter_counts_as_last_quarter():
    dataset = make_dataset(
        moon_phases={2005: year_record(2005, [(3, 3, "Third Quarter")])}
    )
    matches = find_cosmic_birthdays(date(2000, 3, 3), dataset)
    assert matches.last_quarter == (2005,)


def test_failed_years_are_skipped():
    dataset = make_dataset(
        moon_phases={
            2001: YearRecord(year=2001, success=False, error="HTTP 500: x"),
            2002: year_record(2002, [(1, 1, "Full Moon")]),
        }
    )
    matches = find_cosmic_birthdays(date(2000, 1, 1), dataset)
    assert matches.full_moon == (2002,)
    assert matches.processed_years == 1


def test_year_lists_sorted_without_duplicates():
    dataset = make_dataset(
        moon_phases={
            2010: year_record(2010, [(5, 5, "Full Moon"), (5, 5, "Full Moon")]),
            2004: year_record(2004, [(5, 5, "Full Moon")]),
        }
    )
    matches = find_cosmic_birthdays(date(2000, 5, 5), dataset)
    assert matches.full_moon == (2004, 2010)


def test_total_solar_eclipse_on_birthday():
    dataset = make_dataset(solar_eclipses=(make_eclipse(),))

    matches = find_cosmic_birthdays(date(1990, 4, 8), dataset)

    assert len(matches.eclipses) == 1
    eclipse = matches.eclipses[0]
    assert eclipse.year == 2024
    assert eclipse.type == "Total Solar Eclipse"
    assert eclipse.category == "Solar"
    assert eclipse.description == "Total Solar Eclipse on your birthday"
    assert eclipse.date == "2024-04-08"


def test_eclipse_in_birth_year_counts():
    dataset = make_dataset(solar_eclipses=(make_eclipse(),))
    assert len(find_cosmic_birthdays(date(2024, 4, 8), dataset).eclipses) == 1


def test_eclipse_before_birth_year_excluded():
    dataset = make_dataset(solar_eclipses=(make_eclipse(),))
    assert find_cosmic_birthdays(date(2025, 4, 8), dataset).eclipses == ()


def test_eclipses_deduped_by_year_and_type():
    dataset = make_dataset(
        solar_eclipses=(
            make_eclipse(source="NASA Eclipse Catalog"),
            make_eclipse(source="IMCCE Miriade"),
        ),
        lunar_eclipses=(
            make_eclipse(type="lunar", description="2024 Apr 08   P   "),
        ),
    )

    matches = find_cosmic_birthdays(date(2000, 4, 8), dataset)

    assert [e.type for e in matches.eclipses] == [
        "Total Solar Eclipse",
        "Partial Lunar Eclipse",
    ]
    assert matches.total_events == 2


def test_data_source_from_metadata():
    matches = find_cosmic_birthdays(date(2000, 1, 1), make_dataset())
    assert matches.data_source == "test"

    bare = make_dataset(metadata={})
    assert find_cosmic_birthdays(date(2000, 1, 1), bare).data_source == "pre-fetched dataset"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("11/08/1999", date(1999, 8, 11)),
        ("11.08.1999", date(1999, 8, 11)),
        ("11081999", date(1999, 8, 11)),
        ("1999-08-11", date(1999, 8, 11)),
        ("01/01/1900", date(1900, 1, 1)),
        ("31/12/2100", date(2100, 12, 31)),
    ],
)
def test_parse_birth_date(text, expected):
    assert parse_birth_date(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "1999", "32/01/1999", "11/13/1999", "11/08/1899", "01/01/2101", "31/02/2000"],
)
def test_parse_birth_date_rejects(text):
    with pytest.raises(ValueError):
        parse_birth_date(text)
