"""
Date parsing and display helpers for search result subtitles.

Incident dates arrive from the collections API as ISO-8601 strings (date
or datetime, possibly with a trailing "Z"). Display is deliberately small:
English locales get "Jan 5, 2024", every other locale gets "2024-01-05".
"""

from datetime import UTC, date, datetime

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def is_english_locale(locale: str | None) -> bool:
    """Return True for 'en', 'en-US', 'EN_gb', ..."""
    return bool(locale) and locale.strip().lower().startswith("en")


def parse_iso_date(value: object) -> date | None:
    """
    Parse an ISO-8601 date or datetime string into a calendar date.

    - Non-strings and blank strings return None
    - A trailing "Z" is accepted as UTC
    - Aware datetimes are converted to UTC before taking the date; ones
      that fall outside the representable range return None

    Args:
        value: Raw field value from the API payload

    Returns:
        The calendar date, or None when the value is missing or unparsable
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(UTC)
        except (ValueError, OverflowError):
            # Offsets that push year 1 or year 9999 out of range.
            return None
    return parsed.date()


def format_display_date(value: date, locale: str | None) -> str:
    """Format a date for a result subtitle in the given display locale."""
    if is_english_locale(locale):
        return f"{_MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}"
    return value.isoformat()
