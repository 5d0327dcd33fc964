"""Plotly interactive timeline of birthday matches.

One row per event kind, one marker per matching year.
"""

import numpy as np
import plotly.graph_objects as go

from cosmicbirthday.models import BirthdayMatches

_BG = "#0d1b35"
_GRID = "rgba(201,169,110,0.15)"
_ROW_COLORS: dict[str, str] = {
    "Full Moon": "#f0e0b0",
    "New Moon": "#7ec8e3",
    "First Quarter": "#c9a96e",
    "Last Quarter": "#a88bd8",
    "Eclipses": "#ff9966",
}


def timeline_rows(matches: BirthdayMatches) -> dict[str, tuple[int, ...]]:
    """Years per row label, in display order. Empty rows are kept."""
    return {
        "Full Moon": matches.full_moon,
        "New Moon": matches.new_moon,
        "First Quarter": matches.first_quarter,
        "Last Quarter": matches.last_quarter,
        "Eclipses": tuple(e.year for e in matches.eclipses),
    }


def render_timeline(matches: BirthdayMatches) -> go.Figure:
    """Render BirthdayMatches as a Plotly scatter timeline.

    Args:
        matches: Result of find_cosmic_birthdays.

    Returns:
        Plotly Figure object with one trace per non-empty row.
    """
    rows = timeline_rows(matches)
    labels = list(rows)
    eclipse_text = [f"{e.year}: {e.type}" for e in matches.eclipses]

    traces = []
    for i, (label, years) in enumerate(rows.items()):
        if not years:
            continue
        hover = eclipse_text if label == "Eclipses" else [str(y) for y in years]
        traces.append(
            go.Scatter(
                x=list(years),
                y=np.full(len(years), i),
                mode="markers",
                marker=dict(size=12, color=_ROW_COLORS[label], line=dict(width=0)),
                hovertext=hover,
                hoverinfo="text",
                name=label,
            )
        )

    fig = go.Figure(data=traces)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        font=dict(color="#e8d5a3"),
        showlegend=False,
        margin=dict(l=10, r=10, t=10, b=30),
        height=320,
        xaxis=dict(gridcolor=_GRID, zeroline=False, dtick=10),
        yaxis=dict(
            tickvals=list(range(len(labels))),
            ticktext=labels,
            range=[-0.5, len(labels) - 0.5],
            gridcolor=_GRID,
            zeroline=False,
        ),
    )
    fig._config = {"displayModeBar": False}  # type: ignore[attr-defined]
    return fig
