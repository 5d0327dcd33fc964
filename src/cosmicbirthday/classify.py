"""Eclipse subtype classifier.

NASA catalog rows carry the eclipse type as a short code in its own
whitespace-padded column, so a fixed substring test is enough to label them.
"""

_SOLAR_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("   T   ",), "Total"),
    (("   A   ",), "Annular"),
    (("   P   ",), "Partial"),
    (("   H   ",), "Hybrid"),
)

_LUNAR_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("   T-  ", "   T+  ", "   T   "), "Total"),
    (("   P   ",), "Partial"),
    (("   N   ",), "Penumbral"),
)


def short_eclipse_type(description: str, category: str) -> str:
    """Bare subtype ("Total", "Annular", ...) or "Unspecified"."""
    markers = {"solar": _SOLAR_MARKERS, "lunar": _LUNAR_MARKERS}.get(category, ())
    for codes, label in markers:
        if any(code in description for code in codes):
            return label
    return "Unspecified"


def classify_eclipse(description: str | None, category: str) -> str:
    """Human-readable eclipse label. Never empty.

    Args:
        description: Raw catalog line (None is treated as empty).
        category: "solar" or "lunar"; anything else gets a generic label.

    Returns:
        e.g. "Total Solar Eclipse", "Penumbral Lunar Eclipse", "Solar Eclipse".
    """
    if not category:
        return "Eclipse"
    noun = f"{category[0].upper()}{category[1:]} Eclipse"
    subtype = short_eclipse_type(description or "", category)
    if subtype == "Unspecified":
        return noun
    return f"{subtype} {noun}"
