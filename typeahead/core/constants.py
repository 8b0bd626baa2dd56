"""Constants shared across the search engine and its surfaces."""

from typeahead.domain.enums import SourceKind

SEARCH_RESULT_LIMIT = 5
DEBOUNCE_MS = 300

SUBTITLE_SEPARATOR = " • "

# Detail-view routes per source; formatted with the entity's shareable id.
URL_TEMPLATES: dict[SourceKind, str] = {
    SourceKind.REPORT: "/reports/{uuid}",
    SourceKind.INDIVIDUAL: "/person/{uuid}",
    SourceKind.ORGANIZATION: "/org/{uuid}",
}

# Analytics event emitted when a result is chosen.
EVENT_RESULT_SELECTED = "search_result_selected"

# User-visible messages (translation happens in the presentation layer).
MESSAGE_TOTAL_FAILURE = "Search failed. Please try again."
MESSAGE_PARTIAL_FAILURE = "Some sources are unavailable right now; results may be incomplete."
MESSAGE_NO_RESULTS = "No results found"

# Full search page for a submitted term; formatted with the URI-encoded term.
FULL_SEARCH_URL = "/?search={query}"
