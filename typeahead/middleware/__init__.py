"""ASGI middleware. Applied in main app; import from typeahead.main."""

from typeahead.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
