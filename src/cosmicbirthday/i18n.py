"""Simple two-language (en/ko) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "우주 생일 찾기",
        "en": "Cosmic Birthday Finder",
    },
    "subtitle": {
        "ko": "내 생일이 보름달, 그믐달, 일식과 겹치는 해를 찾아보세요",
        "en": "Find the years your birthday falls on a full moon, new moon, or eclipse",
    },
    "label_birth_date": {
        "ko": "생년월일",
        "en": "Birth date",
    },
    "btn_find": {
        "ko": "✦ 찾기",
        "en": "✦ Find",
    },
    "loading": {
        "ko": "✦ 하늘을 살펴보는 중",
        "en": "✦ Searching the sky",
    },
    "full_moon": {
        "ko": "🌕 보름달",
        "en": "🌕 Full Moon",
    },
    "new_moon": {
        "ko": "🌑 신월",
        "en": "🌑 New Moon",
    },
    "first_quarter": {
        "ko": "🌓 상현달",
        "en": "🌓 First Quarter",
    },
    "last_quarter": {
        "ko": "🌗 하현달",
        "en": "🌗 Last Quarter",
    },
    "eclipses": {
        "ko": "🌒 일식·월식",
        "en": "🌒 Eclipses",
    },
    "none_found": {
        "ko": "없음",
        "en": "None in range",
    },
    "total_events": {
        "ko": "총 {count}개의 우주 생일 ({range})",
        "en": "{count} cosmic birthdays ({range})",
    },
    "stats": {
        "ko": "{years}년, 달의 위상 {phases:,}개 확인 · 출처: {source}",
        "en": "Checked {phases:,} moon phases across {years} years · Source: {source}",
    },
    "fallback_notice": {
        "ko": "저장된 데이터가 없어 천체력으로 직접 계산했어요.",
        "en": "No fetched dataset found; phases were calculated from the ephemeris.",
    },
    "error_dataset": {
        "ko": "데이터를 불러올 수 없어요. ({error})",
        "en": "Could not load astronomical data. ({error})",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
