# shared/common/cache.py
"""
Caching Utilities

Thin helpers over the Django cache (django-redis in deployments, LocMem in
tests).
"""

import logging
from functools import wraps

from django.core.cache import cache

logger = logging.getLogger(__name__)


# =============================================================================
# CACHING DECORATORS
# =============================================================================

def cached(
    key_prefix: str,
    timeout: int = 300,
    key_func=None
):
    """
    Decorator for caching function results.

    Usage:
        @cached('summary', timeout=60, key_func=lambda studio_id: studio_id)
        def get_summary(studio_id):
            ...

    ``None`` results are not cached. Cache backend failures fall through to
    the wrapped function.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if key_func:
                cache_key = f"{key_prefix}:{key_func(*args, **kwargs)}"
            else:
                key_parts = [str(arg) for arg in args]
                key_parts.extend([f"{k}={v}" for k, v in sorted(kwargs.items())])
                cache_key = f"{key_prefix}:{':'.join(key_parts)}"

            try:
                result = cache.get(cache_key)
            except Exception as e:
                logger.error(f"Cache get error for {cache_key}: {e}")
                result = None

            if result is not None:
                return result

            result = func(*args, **kwargs)
            if result is not None:
                try:
                    cache.set(cache_key, result, timeout)
                except Exception as e:
                    logger.error(f"Cache set error for {cache_key}: {e}")

            return result

        wrapper.cache_key_prefix = key_prefix
        return wrapper
    return decorator


def invalidate(*keys: str):
    """Delete cache keys, logging backend failures."""
    try:
        cache.delete_many(list(keys))
    except Exception as e:
        logger.error(f"Cache invalidation error: {e}")


class CacheKeyBuilder:
    """
    Helper class for building consistent cache keys.
    """

    def __init__(self, service_name: str):
        self.service_name = service_name

    def build(self, *parts) -> str:
        """Build cache key from parts"""
        return f"{self.service_name}:{':'.join(str(p) for p in parts)}"
