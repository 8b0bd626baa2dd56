"""Use cases: the interactive search session and the one-shot search service."""

from typeahead.application.use_cases.search_session import (
    SearchService,
    SearchSession,
    SearchSessionFactory,
)

__all__ = ["SearchService", "SearchSession", "SearchSessionFactory"]
