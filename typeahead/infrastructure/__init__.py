"""Infrastructure: collections API client, source adapters, analytics capture."""
