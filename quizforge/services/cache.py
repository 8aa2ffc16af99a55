"""
Content-addressed cache for extracted text.

Redis when REDIS_URL is reachable, otherwise a bounded in-process LRU so a
re-uploaded file still skips OCR within one worker.
"""
import hashlib
import json
import threading
from collections import OrderedDict
from typing import Any, Optional

import redis
import structlog

from quizforge.config import EXTRACTION_CACHE_TTL, REDIS_URL

logger = structlog.get_logger()

MEMORY_CACHE_ENTRIES = 256


def extraction_key(data: bytes, media_type: str) -> str:
    return f"extract:{media_type}:{hashlib.sha256(data).hexdigest()}"


class CacheService:
    def __init__(self, redis_url: str = REDIS_URL, max_entries: int = MEMORY_CACHE_ENTRIES):
        self._memory: "OrderedDict[str, Any]" = OrderedDict()
        # extract_many hits the memory backend from several threadpool workers
        self._lock = threading.Lock()
        self.max_entries = max_entries
        try:
            self.redis_client = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=1)
            self.redis_client.ping()
            logger.info("cache_backend_ready", backend="redis")
        except (redis.RedisError, ValueError) as e:
            logger.warning("cache_backend_fallback", backend="memory", error=str(e))
            self.redis_client = None

    @property
    def backend(self) -> str:
        return "redis" if self.redis_client else "memory"

    def get(self, key: str) -> Optional[Any]:
        if self.redis_client is None:
            with self._lock:
                if key not in self._memory:
                    return None
                self._memory.move_to_end(key)
                return self._memory[key]
        try:
            value = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.error("cache_get_failed", key=key, error=str(e))
            return None
        return json.loads(value) if value is not None else None

    def set(self, key: str, value: Any, expire: int = EXTRACTION_CACHE_TTL) -> bool:
        if self.redis_client is None:
            with self._lock:
                self._memory[key] = value
                self._memory.move_to_end(key)
                while len(self._memory) > self.max_entries:
                    self._memory.popitem(last=False)
            return True
        try:
            return bool(self.redis_client.setex(key, expire, json.dumps(value)))
        except redis.RedisError as e:
            logger.error("cache_set_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        if self.redis_client is None:
            with self._lock:
                return self._memory.pop(key, None) is not None
        try:
            return bool(self.redis_client.delete(key))
        except redis.RedisError as e:
            logger.error("cache_delete_failed", key=key, error=str(e))
            return False


# Global cache instance
cache = CacheService()
