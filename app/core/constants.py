"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure. Used by
app.infrastructure.cache.keys and the cache service.
"""

# Cache key prefixes (domain segment of domain:identifier:facet)
CACHE_PREFIX_COURSE = "course"
CACHE_PREFIX_LESSON = "lesson"
CACHE_PREFIX_GRANDTEST = "grandtest"
CACHE_PREFIX_ENROLLMENT = "enrollment"
CACHE_PREFIX_ADMIN = "admin"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Default entry lifetime when set() is called without a TTL
CACHE_DEFAULT_TTL = 3600

# Keys per UNLINK pipeline during pattern deletion
CACHE_DELETE_CHUNK_SIZE = 500

# Port used when a REST-style (https) endpoint is given as BACKEND_URL
CACHE_TLS_PORT = 6379
