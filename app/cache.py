"""
Redis caching utilities for the slot catalogue
Lets new scheduling sessions skip the hosted backend round trip
"""
import json
import logging
from typing import Any, Optional

import redis

from .config import REDIS_URL

logger = logging.getLogger(__name__)

SLOT_CATALOGUE_KEY = "time_slots:catalogue"


def get_redis_client(redis_url: Optional[str] = None) -> Optional[redis.Redis]:
    """Create a Redis client from REDIS_URL, or None when caching is not configured"""
    url = redis_url or REDIS_URL
    if not url:
        return None

    # Mask password in URL for logging
    if "@" in url:
        url_parts = url.split("@")
        protocol = url_parts[0].split(":")[0]
        masked_url = f"{protocol}:****@{url_parts[1]}"
    else:
        masked_url = "****"
    logger.info(f"📡 Using Redis URL connection: {masked_url}")

    client = redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    client.ping()
    return client


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client = client
        self._disabled = False

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None and not self._disabled:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                self.redis_client = None
            if self.redis_client is None:
                self._disabled = True
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Set value in cache with TTL (default 5 minutes)"""
        client = self._get_client()
        if not client or ttl <= 0:
            return False

        try:
            serialized = json.dumps(value)
            client.setex(key, ttl, serialized)
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


# Global cache instance
cache = Cache()


def invalidate_slot_catalogue_cache() -> bool:
    """Invalidate the cached catalogue after time slots are edited"""
    return cache.delete(SLOT_CATALOGUE_KEY)
