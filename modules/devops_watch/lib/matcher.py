from __future__ import annotations

from collections.abc import Iterable

# Plain substring match on purpose: "devops-engineer", "cloudops" etc. all count.
DEFAULT_KEYWORDS: tuple[str, ...] = (
    "devops",
    "cloud",
    "platform",
    "sre",
    "terraform",
    "azure",
    "kubernetes",
)

DEFAULT_LOCATION = "halifax"


def text_matches_keywords(text: str | None, keywords: Iterable[str] = DEFAULT_KEYWORDS) -> bool:
    """True if the lowercased text contains any keyword."""
    if not text:
        return False
    low = text.lower()
    return any(k.lower() in low for k in keywords)


def location_contains(target: str, loc: str | None) -> bool:
    """True if `loc` contains `target`, ignoring case."""
    return (target or "").lower() in (loc or "").lower()
