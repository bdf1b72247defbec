"""
Caching utilities for expensive queries
Uses the configured Django cache (Redis in production) for aggregated results
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTL (in seconds)
DASHBOARD_CACHE_TTL = getattr(settings, 'DASHBOARD_CACHE_TTL', 300)  # 5 minutes

DASHBOARD_VERSION_KEY = 'dashboard_version'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard")
        def get_expensive_data(user_id, version):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def get_cache_version(version_key):
    """Current version number for a family of cached entries"""
    version = cache.get(version_key)
    if version is None:
        version = 1
        cache.add(version_key, version, None)
    return version


def bump_cache_version(version_key):
    """
    Invalidate every entry keyed on `version_key` by moving to the next version.
    Old entries are left to expire on their TTL.
    """
    try:
        return cache.incr(version_key)
    except ValueError:
        # Key missing (evicted or never read)
        cache.set(version_key, 2, None)
        return 2


def get_dashboard_version():
    return get_cache_version(DASHBOARD_VERSION_KEY)


def invalidate_dashboard_cache():
    """Invalidate dashboard summaries for all users"""
    version = bump_cache_version(DASHBOARD_VERSION_KEY)
    logger.info(f"Invalidated dashboard cache (version {version})")
