"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the
same instance without circular imports. Central limit strings and
decorators keep rate limits DRY.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Admin cache routes can flush or scan the shared keyspace.
ADMIN_CACHE_READ_LIMIT = "60/minute"
ADMIN_CACHE_WRITE_LIMIT = "10/minute"

limit_admin_cache_reads = limiter.limit(ADMIN_CACHE_READ_LIMIT)
limit_admin_cache_writes = limiter.limit(ADMIN_CACHE_WRITE_LIMIT)
