"""Matplotlib static PNG renderer."""

from datetime import date
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from cosmicbirthday.models import BirthdayMatches  # noqa: E402
from cosmicbirthday.renderers.plotly_timeline import timeline_rows  # noqa: E402

_ROOT = Path(__file__).parent.parent.parent.parent
_BG = "#0d1b35"
_FG = "#e8d5a3"


def render_static_timeline(
    matches: BirthdayMatches, birth: date, chart_width: int = 10
) -> Figure:
    """Render BirthdayMatches as a static matplotlib timeline.

    Args:
        matches: Result of find_cosmic_birthdays.
        birth: Birth date, used in the title.
        chart_width: Output image width in inches.

    Returns:
        matplotlib Figure object.
    """
    rows = timeline_rows(matches)
    fig, ax = plt.subplots(figsize=(chart_width, chart_width * 0.35))
    fig.patch.set_facecolor(_BG)
    ax.set_facecolor(_BG)

    for i, years in enumerate(rows.values()):
        if years:
            ax.scatter(
                np.array(years), np.full(len(years), i), s=60, color=_FG, zorder=2
            )

    ax.set_yticks(range(len(rows)))
    ax.set_yticklabels(list(rows), color=_FG)
    ax.tick_params(axis="x", colors=_FG)
    ax.set_ylim(-0.5, len(rows) - 0.5)
    ax.grid(axis="x", color=_FG, alpha=0.15)
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.set_title(
        f"Cosmic birthdays for {birth.strftime('%d %B')} since {birth.year}",
        color=_FG,
    )
    fig.tight_layout()
    return fig


def save_static_timeline(
    matches: BirthdayMatches, birth: date, output_path: Path | None = None
) -> Path:
    """Save the timeline as a PNG file.

    Args:
        matches: Result of find_cosmic_birthdays.
        birth: Birth date.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / f"cosmic_birthday_{birth.isoformat()}.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_timeline(matches, birth)
    fig.savefig(output_path, facecolor=_BG)
    plt.close(fig)
    return output_path
