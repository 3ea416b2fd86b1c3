"""Infer an event category from its name and description."""

CATEGORIES = ("social", "work", "celebration")

# Checked in order; the first matching group wins
CATEGORY_KEYWORDS = (
    ("celebration", ("birthday", "party", "celebration", "anniversary", "wedding")),
    ("work", ("meeting", "project", "work", "deadline", "presentation")),
)

DEFAULT_CATEGORY = "social"


def infer_category(name: str | None, description: str | None = None) -> str:
    """
    Classify event text as celebration, work or social.

    Matching is a case-insensitive substring search over the name and the
    description together. Celebration keywords take precedence over work
    keywords, and anything else is social.
    """
    text = f"{name or ''} {description or ''}".lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def event_category(event) -> str:
    """Return the explicit category if set, otherwise the inferred one."""
    if event.category in CATEGORIES:
        return event.category
    return infer_category(event.name, event.description)
