"""Collections API integration (reports, individuals, organizations)."""

from typeahead.infrastructure.external.search_api.adapters import (
    IndividualSourceAdapter,
    OrganizationSourceAdapter,
    ReportSourceAdapter,
    unwrap_envelope,
)
from typeahead.infrastructure.external.search_api.client import SearchApiClient
from typeahead.infrastructure.external.search_api.factory import build_source_adapters

__all__ = [
    "IndividualSourceAdapter",
    "OrganizationSourceAdapter",
    "ReportSourceAdapter",
    "SearchApiClient",
    "build_source_adapters",
    "unwrap_envelope",
]
