"""Presentation layer: REST and WebSocket surfaces over the search engine."""
