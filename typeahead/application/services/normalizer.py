"""Maps collection-native items to uniform AggregatedResult records.

Pure: no I/O, no state beyond the display locale. Field selection is
locale-aware: the English field is preferred for English locales, the
native field otherwise, each falling back to the other and finally to "".
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from typeahead.core.constants import SUBTITLE_SEPARATOR, URL_TEMPLATES
from typeahead.domain.enums import SourceKind
from typeahead.domain.exceptions import NormalizationDefect, UnknownSourceKindException
from typeahead.domain.value_objects import AggregatedResult
from typeahead.shared.utils.datetime import (
    format_display_date,
    is_english_locale,
    parse_iso_date,
)

logger = logging.getLogger(__name__)

# (english field, native field) for the displayed title.
_TITLE_FIELDS: dict[SourceKind, tuple[str, str]] = {
    SourceKind.REPORT: ("titleEn", "title"),
    SourceKind.INDIVIDUAL: ("fullNameEn", "fullName"),
    SourceKind.ORGANIZATION: ("nameEn", "name"),
}

_ID_FIELD = "shareableUuid"


def _text(value: Any) -> str | None:
    """Return a stripped non-empty string, or None for anything else."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _pick(raw: Mapping[str, Any], english_field: str, native_field: str, english: bool) -> str | None:
    first, second = (english_field, native_field) if english else (native_field, english_field)
    return _text(raw.get(first)) or _text(raw.get(second))


def _join(segments: Iterable[str | None]) -> str | None:
    present = [s for s in segments if s]
    return SUBTITLE_SEPARATOR.join(present) if present else None


def _coerce_kind(kind: SourceKind | str) -> SourceKind:
    if isinstance(kind, SourceKind):
        return kind
    try:
        return SourceKind(kind)
    except ValueError:
        raise UnknownSourceKindException(kind) from None


class ResultNormalizer:
    """Normalizer bound to one display locale (one per search surface)."""

    def __init__(self, locale: str = "en") -> None:
        self.locale = locale
        self._subtitles: dict[SourceKind, Callable[[Mapping[str, Any], str], str | None]] = {
            SourceKind.REPORT: self._report_subtitle,
            SourceKind.INDIVIDUAL: self._individual_subtitle,
            SourceKind.ORGANIZATION: self._organization_subtitle,
        }

    def normalize(
        self,
        kind: SourceKind | str,
        raw_item: Any,
        locale: str | None = None,
    ) -> AggregatedResult:
        """Map one raw item to an AggregatedResult.

        Missing or wrongly-typed display fields degrade to "" / None.

        Args:
            kind: Source the item came from.
            raw_item: Collection-native record (a JSON object).
            locale: Display locale; defaults to the normalizer's locale.

        Raises:
            UnknownSourceKindException: kind is not a SourceKind.
            NormalizationDefect: item is not an object or has no identifier.
        """
        source = _coerce_kind(kind)
        if not isinstance(raw_item, Mapping):
            raise NormalizationDefect(source.value, f"expected an object, got {type(raw_item).__name__}")
        entity_id = _text(raw_item.get(_ID_FIELD))
        if entity_id is None:
            raise NormalizationDefect(source.value, f"missing {_ID_FIELD}")

        active_locale = locale or self.locale
        english = is_english_locale(active_locale)
        title = _pick(raw_item, *_TITLE_FIELDS[source], english) or ""
        return AggregatedResult(
            id=f"{entity_id}-{source.value}",
            type=source,
            title=title,
            subtitle=self._subtitles[source](raw_item, active_locale),
            url=URL_TEMPLATES[source].format(uuid=entity_id),
        )

    def normalize_many(
        self,
        kind: SourceKind | str,
        raw_items: Iterable[Any],
        locale: str | None = None,
    ) -> list[AggregatedResult]:
        """Normalize a branch's items in order.

        An item that cannot be normalized for any reason is omitted; the rest
        of the branch is kept. Only an unknown kind is raised.
        """
        source = _coerce_kind(kind)
        results: list[AggregatedResult] = []
        for raw in raw_items:
            try:
                results.append(self.normalize(source, raw, locale))
            except NormalizationDefect as e:
                logger.debug("Skipping item: %s", e.message)
            except Exception as e:
                logger.warning(
                    "Skipping %s item that failed to normalize: %s: %s",
                    source.value,
                    type(e).__name__,
                    e,
                )
        return results

    @staticmethod
    def _report_subtitle(raw: Mapping[str, Any], locale: str) -> str | None:
        """Incident location and incident date, e.g. "Tehran • Jan 5, 2024"."""
        english = is_english_locale(locale)
        location = _pick(raw, "incidentLocationEn", "incidentLocation", english)
        incident_date = parse_iso_date(raw.get("incidentDate"))
        formatted = format_display_date(incident_date, locale) if incident_date else None
        return _join((location, formatted))

    @staticmethod
    def _individual_subtitle(raw: Mapping[str, Any], locale: str) -> str | None:
        return _join((_text(raw.get("currentRole")), _text(raw.get("currentOrganization"))))

    @staticmethod
    def _organization_subtitle(raw: Mapping[str, Any], locale: str) -> str | None:
        return _pick(raw, "descriptionEn", "description", is_english_locale(locale))
