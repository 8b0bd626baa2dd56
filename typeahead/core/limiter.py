"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from typeahead.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

limit_search = limiter.limit(lambda: get_settings().search_rate_limit)
