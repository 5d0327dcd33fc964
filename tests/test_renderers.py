from __future__ import annotations

from datetime import date

from cosmicbirthday.models import BirthdayMatches, EclipseMatch
from cosmicbirthday.renderers.plotly_timeline import render_timeline, timeline_rows
from cosmicbirthday.renderers.static import save_static_timeline


def _matches(**overrides) -> BirthdayMatches:
    fields = {
        "full_moon": (2030,),
        "new_moon": (1999, 2018),
        "first_quarter": (),
        "last_quarter": (),
        "eclipses": (
            EclipseMatch(
                year=1999,
                type="Total Solar Eclipse",
                category="Solar",
                date="1999-08-11",
                raw_description="1999 Aug 11   T   ",
            ),
        ),
        "search_range": "1999 - 2100",
        "processed_years": 102,
        "processed_phases": 5000,
        "data_source": "test",
    }
    fields.update(overrides)
    return BirthdayMatches(**fields)


def test_rows_in_display_order():
    rows = timeline_rows(_matches())
    assert list(rows) == ["Full Moon", "New Moon", "First Quarter", "Last Quarter", "Eclipses"]
    assert rows["Eclipses"] == (1999,)


def test_plotly_skips_empty_rows():
    fig = render_timeline(_matches())
    assert [trace.name for trace in fig.data] == ["Full Moon", "New Moon", "Eclipses"]
    assert list(fig.data[2].hovertext) == ["1999: Total Solar Eclipse"]


def test_plotly_no_matches():
    empty = _matches(full_moon=(), new_moon=(), eclipses=())
    assert len(render_timeline(empty).data) == 0


def test_static_png(tmp_path):
    path = save_static_timeline(_matches(), date(1999, 8, 11), tmp_path / "out" / "t.png")
    assert path.is_file()
    assert path.stat().st_size > 0
