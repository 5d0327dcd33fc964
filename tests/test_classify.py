from __future__ import annotations

import pytest

from cosmicbirthday.classify import classify_eclipse, short_eclipse_type


@pytest.mark.parametrize(
    "description, category, expected",
    [
        ("2024 Apr 08   T   Total", "solar", "Total Solar Eclipse"),
        ("2023 Oct 14   A   Annular", "solar", "Annular Solar Eclipse"),
        ("2022 Oct 25   P   ", "solar", "Partial Solar Eclipse"),
        ("2023 Apr 20   H   ", "solar", "Hybrid Solar Eclipse"),
        ("2022 Nov 08   T-  ", "lunar", "Total Lunar Eclipse"),
        ("2022 May 16   T+  ", "lunar", "Total Lunar Eclipse"),
        ("2021 Nov 19   P   ", "lunar", "Partial Lunar Eclipse"),
        ("2024 Mar 25   N   ", "lunar", "Penumbral Lunar Eclipse"),
    ],
)
def test_markers(description, category, expected):
    assert classify_eclipse(description, category) == expected


def test_no_marker_gives_category_label():
    assert classify_eclipse("Solar Eclipse (calculated)", "solar") == "Solar Eclipse"
    assert classify_eclipse("something", "lunar") == "Lunar Eclipse"


def test_none_description():
    assert classify_eclipse(None, "lunar") == "Lunar Eclipse"


def test_empty_category():
    assert classify_eclipse("2024 Apr 08   T   ", "") == "Eclipse"


def test_lunar_markers_do_not_apply_to_solar():
    assert classify_eclipse("2024 Mar 25   N   ", "solar") == "Solar Eclipse"


@pytest.mark.parametrize("description", ["", "   T   ", "xyz", "   A   ", "   N   "])
@pytest.mark.parametrize("category", ["solar", "lunar", "", "other"])
def test_label_is_never_empty(description, category):
    assert classify_eclipse(description, category)


def test_short_type_unspecified():
    assert short_eclipse_type("no code", "solar") == "Unspecified"
    assert short_eclipse_type("   P   ", "lunar") == "Partial"
