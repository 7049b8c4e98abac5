"""Redis cache for /transform results.

The cache is keyed on the textual source and target definitions plus a
digest of the submitted points. Redis failures degrade to cache misses; a
service without REDIS_URL gets a disabled cache with the same interface.
"""
from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, List, Optional, Sequence, Tuple

import redis.asyncio as redis

from app.settings import Settings

logger = logging.getLogger(__name__)

Points = Sequence[Sequence[float]]


def transform_cache_key(source: str, target: str, points: Points) -> str:
    digest = hashlib.sha1()
    digest.update(source.encode("utf-8"))
    digest.update(b"|")
    digest.update(target.encode("utf-8"))
    for point in points:
        digest.update(b"\n")
        digest.update(",".join(repr(float(v)) for v in point).encode("ascii"))
    return f"transform:{digest.hexdigest()}"


class DisabledCache:
    enabled = False

    async def get_transform(self, source: str, target: str, points: Points) -> Optional[Tuple[List, int]]:
        return None

    async def set_transform(self, source: str, target: str, points: Points, result: List, legs: int) -> bool:
        return False

    async def close(self) -> None:
        return None


class TransformCache:
    """Stores ``{"points": [...], "legs": n}`` documents under ``<prefix>:transform:<sha1>``."""

    enabled = True

    def __init__(self, client: Any, prefix: str = "crs", ttl: int = 3600):
        self.client = client
        self.prefix = prefix.rstrip(":")
        self.ttl = ttl

    def key_for(self, source: str, target: str, points: Points) -> str:
        key = transform_cache_key(source, target, points)
        return f"{self.prefix}:{key}" if self.prefix else key

    async def get_transform(self, source: str, target: str, points: Points) -> Optional[Tuple[List, int]]:
        key = self.key_for(source, target, points)
        try:
            raw = await self.client.get(key)
        except (redis.RedisError, OSError) as e:
            logger.debug("cache.get_failed key=%s error=%s", key, e)
            return None
        if raw is None:
            return None
        try:
            doc = json.loads(raw)
        except ValueError:
            logger.debug("cache.undecodable key=%s", key)
            return None
        if not isinstance(doc, dict) or "points" not in doc:
            return None
        return doc["points"], int(doc.get("legs", 0))

    async def set_transform(self, source: str, target: str, points: Points, result: List, legs: int) -> bool:
        key = self.key_for(source, target, points)
        payload = json.dumps({"points": result, "legs": legs}, separators=(",", ":"))
        try:
            await self.client.set(key, payload, ex=self.ttl)
        except (redis.RedisError, OSError) as e:
            logger.debug("cache.set_failed key=%s error=%s", key, e)
            return False
        return True

    async def close(self) -> None:
        try:
            await self.client.aclose()
        except (redis.RedisError, OSError) as e:
            logger.debug("cache.close_failed error=%s", e)


def build_cache(settings: Settings) -> TransformCache | DisabledCache:
    """Redis connections are opened lazily, so an unreachable server only shows up as misses."""
    if not settings.cache_enabled:
        return DisabledCache()
    try:
        client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=False)
    except ValueError as e:
        logger.warning("cache.bad_url url=%r error=%s", settings.redis_url, e)
        return DisabledCache()
    logger.info("cache.enabled prefix=%s ttl=%s", settings.cache_prefix, settings.cache_ttl)
    return TransformCache(client, prefix=settings.cache_prefix, ttl=settings.cache_ttl)


__all__ = ["TransformCache", "DisabledCache", "build_cache", "transform_cache_key"]
