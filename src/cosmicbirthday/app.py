"""Cosmic Birthday Finder — Streamlit page for looking up a birthday."""

import datetime
import html

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from cosmicbirthday.calculate import calculated_dataset  # noqa: E402
from cosmicbirthday.config import FetchSettings  # noqa: E402
from cosmicbirthday.i18n import t  # noqa: E402
from cosmicbirthday.matcher import (  # noqa: E402
    MAX_BIRTH_YEAR,
    MIN_BIRTH_YEAR,
    find_cosmic_birthdays,
)
from cosmicbirthday.models import BirthdayMatches, Dataset  # noqa: E402
from cosmicbirthday.renderers.plotly_timeline import render_timeline  # noqa: E402
from cosmicbirthday.storage import DatasetError, find_dataset  # noqa: E402

# --- Language detection (browser-first via streamlit-js-eval) ---
# The first run returns None; the rerun streamlit_js_eval triggers fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🌕",
    layout="centered",
)

if "matches" not in st.session_state:
    st.session_state.matches = None
if "calculated" not in st.session_state:
    st.session_state.calculated = False
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None

st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #0d1b35 !important;
        color: #e8d5a3;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] { display: none !important; }
    [data-testid="stButton"] button {
        background-color: rgba(126, 200, 227, 0.2) !important;
        color: #7ec8e3 !important;
        border: 1px solid #7ec8e3 !important;
        border-radius: 6px !important;
    }
    label, [data-testid="stWidgetLabel"] p { color: #aaaaaa !important; }
    .event-card {
        border-top: 1px solid rgba(201,169,110,0.18);
        padding: 0.6rem 0;
    }
    .event-card h4 { color: #e8d5a3; margin: 0 0 0.3rem 0; }
    .event-card p  { color: #cccccc; margin: 0; line-height: 1.6; }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_data(show_spinner=False)
def _load_dataset() -> tuple[Dataset, bool]:
    """Persisted dataset if one exists, otherwise a calculated one.

    Returns:
        (dataset, calculated) where calculated is True for the offline fallback.
    """
    settings = FetchSettings.from_env()
    try:
        return find_dataset(settings.output_dir, settings.start_year, settings.end_year), False
    except DatasetError:
        return (
            calculated_dataset(settings.start_year, settings.end_year, settings.ephemeris_dir),
            True,
        )


def _years_html(years: tuple[int, ...]) -> str:
    if not years:
        return t("none_found", _lang)
    return ", ".join(str(y) for y in years)


def _render_results(matches: BirthdayMatches) -> None:
    st.markdown(
        f"### {t('total_events', _lang).format(count=matches.total_events, range=matches.search_range)}"
    )
    for key, years in (
        ("full_moon", matches.full_moon),
        ("new_moon", matches.new_moon),
        ("first_quarter", matches.first_quarter),
        ("last_quarter", matches.last_quarter),
    ):
        st.markdown(
            f"<div class='event-card'><h4>{t(key, _lang)}</h4>"
            f"<p>{_years_html(years)}</p></div>",
            unsafe_allow_html=True,
        )

    if matches.eclipses:
        items = "<br>".join(
            f"{e.year} — {html.escape(e.description)}" for e in matches.eclipses
        )
    else:
        items = t("none_found", _lang)
    st.markdown(
        f"<div class='event-card'><h4>{t('eclipses', _lang)}</h4><p>{items}</p></div>",
        unsafe_allow_html=True,
    )

    if matches.total_events:
        st.plotly_chart(render_timeline(matches), use_container_width=True)

    st.caption(
        t("stats", _lang).format(
            years=matches.processed_years,
            phases=matches.processed_phases,
            source=matches.data_source,
        )
    )
    if st.session_state.calculated:
        st.caption(t("fallback_notice", _lang))


st.title(t("page_title", _lang))
st.caption(t("subtitle", _lang))

col1, col2 = st.columns([3, 1])
with col1:
    birth = st.date_input(
        t("label_birth_date", _lang),
        value=datetime.date(1999, 8, 11),
        min_value=datetime.date(MIN_BIRTH_YEAR, 1, 1),
        max_value=datetime.date(MAX_BIRTH_YEAR, 12, 31),
        format="DD/MM/YYYY",
    )
with col2:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    submitted = st.button(t("btn_find", _lang), key="find_btn", use_container_width=True)

if submitted:
    st.session_state.error_msg = None
    with st.spinner(t("loading", _lang)):
        try:
            dataset, calculated = _load_dataset()
            st.session_state.matches = find_cosmic_birthdays(birth, dataset)
            st.session_state.calculated = calculated
        except (OSError, ValueError) as e:
            st.session_state.matches = None
            st.session_state.error_msg = t("error_dataset", _lang).format(
                error=html.escape(str(e))
            )

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)
elif st.session_state.matches is not None:
    _render_results(st.session_state.matches)
