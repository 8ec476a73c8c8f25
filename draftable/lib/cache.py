"""
Test-friendly helpers for caching.

Settings lookups and relation metadata are resolved once and then reused for
the lifetime of the process. Tests frequently override settings, so every cache
created through this module has to be clearable in one call.
"""
import functools

# Every function wrapped by our lru_cache decorator.
_lru_cached_fns = []


def lru_cache(*args, **kwargs):
    """
    Thin wrapper over functools.lru_cache that lets us clear all caches later.
    """
    def decorator(fn):
        wrapped_fn = functools.lru_cache(*args, **kwargs)(fn)
        _lru_cached_fns.append(wrapped_fn)
        return wrapped_fn
    return decorator


def clear_lru_caches():
    """
    Clear all LRU caches that use our lru_cache decorator.

    Called by the test TestCase and whenever the DRAFTABLE setting changes.
    """
    for fn in _lru_cached_fns:
        fn.cache_clear()
