"""Operate on the shared cache from the command line.

Usage:
    uv run python -m scripts.cache_admin exists lesson:abc:content
    uv run python -m scripts.cache_admin invalidate-pattern 'enrollment:*:structure'
    uv run python -m scripts.cache_admin invalidate-tags questions progress
    uv run python -m scripts.cache_admin clear --yes
Requires BACKEND_URL and BACKEND_TOKEN. The keyspace is shared by every
instance, so invalidation and clear are system-wide.
"""

import asyncio
import sys

from app.core.config import get_settings
from app.core.lifespan import build_cache_service

USAGE = "usage: cache_admin {exists KEY... | invalidate-pattern PATTERN... | invalidate-tags TAG... | clear --yes}"


async def main(argv: list[str]) -> int:
    """Run one cache command; return the process exit code."""
    if not argv:
        print(USAGE, file=sys.stderr)
        return 2
    command, args = argv[0], argv[1:]

    cache = build_cache_service(get_settings())
    if not cache.is_available():
        print("Cache backend not configured (set BACKEND_URL and BACKEND_TOKEN)", file=sys.stderr)
        return 1

    try:
        if command == "exists" and args:
            for key in args:
                print(f"{key}: {'present' if await cache.exists(key) else 'absent'}")
        elif command == "invalidate-pattern" and args:
            total = 0
            for pattern in args:
                deleted = await cache.delete_pattern(pattern)
                print(f"{pattern}: {deleted} key(s) deleted")
                total += deleted
            print(f"Done. Total deleted: {total}")
        elif command == "invalidate-tags" and args:
            deleted = await cache.invalidate_by_tags(args)
            print(f"Done. Total deleted: {deleted}")
        elif command == "clear":
            if "--yes" not in args:
                print("Refusing to flush the shared cache without --yes", file=sys.stderr)
                return 2
            if not await cache.clear_all():
                print("Cache clear failed (see log)", file=sys.stderr)
                return 1
            print("Cache cleared")
        else:
            print(USAGE, file=sys.stderr)
            return 2
    finally:
        await cache.connector.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
