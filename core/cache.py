from aiocache import cached as aiocache_cached, SimpleMemoryCache
from typing import Optional, Callable
import logging

from core.config import settings

logger = logging.getLogger(__name__)

def cached(
    expire: Optional[int] = None,
    namespace: Optional[str] = None,
    key_builder: Optional[Callable] = None
):
    """Cache decorator that respects the enabled setting."""
    def decorator(func):
        if not settings.cache["enabled"]:
            return func

        # Get TTL from settings if not provided
        ttl = expire
        if ttl is None and namespace:
            ttl = settings.get_cache_ttl().get(namespace)

        return aiocache_cached(
            ttl=ttl,
            namespace=f"{settings.cache['prefix']}:{namespace or func.__name__}",
            key_builder=key_builder,
            cache=SimpleMemoryCache,
            noself=True
        )(func)

    return decorator
