"""Application layer: the search engine (use cases, services, DTOs, ports)."""
