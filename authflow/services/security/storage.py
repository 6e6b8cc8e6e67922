"""Key-value backends for device security state"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ...core.utils.exceptions import ServiceException

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Async string storage with optional TTL"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store a value, expiring after `ttl` seconds when given"""
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        pass


class MemoryStorage(KeyValueStorage):
    """In-process storage"""

    def __init__(self):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires = entry
        if expires is not None and expires <= time.monotonic():
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires = time.monotonic() + ttl if ttl else None
        self._data[key] = (value, expires)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)


class RedisStorage(KeyValueStorage):
    """Redis-backed storage, keys namespaced per device"""

    def __init__(self, redis_client: aioredis.Redis, key_prefix: str = "authflow:"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "authflow:") -> "RedisStorage":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=30,
            socket_connect_timeout=30,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client, key_prefix)

    def _get_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(self._get_key(key))
        except RedisError as e:
            logger.error(f"Redis error getting {key}: {str(e)}")
            raise ServiceException(
                message=f"Failed to read {key}",
                code="STORAGE_READ_ERROR",
                service="redis_storage",
                action="get"
            ) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self.redis.set(self._get_key(key), value, ex=ttl)
        except RedisError as e:
            logger.error(f"Redis error setting {key}: {str(e)}")
            raise ServiceException(
                message=f"Failed to write {key}",
                code="STORAGE_WRITE_ERROR",
                service="redis_storage",
                action="set"
            ) from e

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.redis.delete(*(self._get_key(key) for key in keys))
        except RedisError as e:
            logger.error(f"Redis error deleting {keys}: {str(e)}")
            raise ServiceException(
                message="Failed to delete keys",
                code="STORAGE_DELETE_ERROR",
                service="redis_storage",
                action="delete"
            ) from e
