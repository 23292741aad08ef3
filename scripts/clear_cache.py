#!/usr/bin/env python3
"""
Clear task for the dynamic page cache.

Empties the configured response store, e.g. after a deployment that
changes templates. Uses the same environment variables as the app.
"""

import sys

from page_cache import DynamicCacheService, RedisResponseStore, settings


def main() -> int:
    """Clear the cache and report the outcome."""
    print(f"Redis URL: {settings.redis_url}")
    print(f"Key prefix: {settings.cache_prefix}")

    cache = DynamicCacheService.create(store=RedisResponseStore.create(settings))
    if not cache.clear():
        print("DynamicCache could not be cleared: response store unavailable", file=sys.stderr)
        return 1

    print("DynamicCache has been cleared.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
