"""
Revoked-session denylist backends.

Entries expire after the access-token TTL; past that every access token
minted for the session has expired on its own.
"""

import logging
import time
from datetime import timedelta
from typing import Dict, Iterable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.app.services.revoked_session_cache import RevokedSessionCache

logger = logging.getLogger(__name__)


def _make_cache_key(session_id: str) -> str:
    return f"revoked_session:{session_id}"


class RedisRevokedSessionCache(RevokedSessionCache):
    def __init__(self, client: redis.Redis, ttl: timedelta):
        self.client = client
        self.ttl_seconds = max(int(ttl.total_seconds()), 1)

    @classmethod
    def from_url(cls, url: str, ttl: timedelta) -> "RedisRevokedSessionCache":
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, ttl)

    async def add(self, session_ids: Iterable[str]) -> None:
        session_ids = list(session_ids)
        if not session_ids:
            return
        try:
            async with self.client.pipeline(transaction=False) as pipe:
                for session_id in session_ids:
                    pipe.setex(_make_cache_key(session_id), self.ttl_seconds, "1")
                await pipe.execute()
        except RedisError as e:
            logger.error("Failed to denylist %d session(s): %s", len(session_ids), e)

    async def contains(self, session_id: str) -> bool:
        try:
            return bool(await self.client.exists(_make_cache_key(session_id)))
        except RedisError as e:
            logger.error("Revoked-session lookup failed, allowing request: %s", e)
            return False

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryRevokedSessionCache(RevokedSessionCache):
    """Process-local denylist for single-worker deployments and tests"""

    def __init__(self, ttl: timedelta, clock=time.monotonic):
        self.ttl_seconds = ttl.total_seconds()
        self._clock = clock
        self._entries: Dict[str, float] = {}

    async def add(self, session_ids: Iterable[str]) -> None:
        deadline = self._clock() + self.ttl_seconds
        for session_id in session_ids:
            self._entries[session_id] = deadline
        self._purge()

    async def contains(self, session_id: str) -> bool:
        deadline: Optional[float] = self._entries.get(session_id)
        if deadline is None:
            return False
        if deadline <= self._clock():
            self._entries.pop(session_id, None)
            return False
        return True

    def _purge(self) -> None:
        now = self._clock()
        for session_id in [s for s, deadline in self._entries.items() if deadline <= now]:
            del self._entries[session_id]
