"""
Admin session tokens

The admin panel authenticates with a shared code and then carries an opaque
bearer token. Tokens live in an AdminTokenStore (never in the relational
database); each successful verification slides the expiry forward.
"""

import asyncio
import logging
import threading
import time
from typing import Callable, Dict, Optional

import redis
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.security import SecurityUtils

logger = logging.getLogger(__name__)


class AdminTokenStore:
    """Interface shared by the in-memory and Redis stores"""

    kind = "abstract"

    def issue(self) -> str:
        raise NotImplementedError

    def verify(self, token: str) -> bool:
        raise NotImplementedError

    def revoke(self, token: str) -> None:
        raise NotImplementedError

    def sweep(self) -> int:
        raise NotImplementedError


class InMemoryAdminTokenStore(AdminTokenStore):
    """
    Process-local store

    Every read-modify-write (issue, verify, revoke, sweep) runs under one lock,
    so a sweep cannot remove an entry whose expiry a concurrent verify just
    extended.
    """

    kind = "memory"

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._tokens: Dict[str, float] = {}
        self._lock = threading.Lock()

    def issue(self) -> str:
        token = SecurityUtils.generate_admin_token()
        with self._lock:
            self._tokens[token] = self._clock() + self.ttl_seconds
        return token

    def verify(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            expires_at = self._tokens.get(token)
            if expires_at is None:
                return False
            now = self._clock()
            if now > expires_at:
                del self._tokens[token]
                return False
            self._tokens[token] = now + self.ttl_seconds
            return True

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def sweep(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [token for token, expires_at in self._tokens.items() if now > expires_at]
            for token in expired:
                del self._tokens[token]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


class RedisAdminTokenStore(AdminTokenStore):
    """
    Shared store for multi-process deployments

    Redis expires keys on its own; GETEX reads and re-arms the TTL atomically.
    """

    kind = "redis"
    key_prefix = "admin_token:"

    def __init__(self, client: redis.Redis, ttl_seconds: int = 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def issue(self) -> str:
        token = SecurityUtils.generate_admin_token()
        self.client.set(self._key(token), "1", ex=self.ttl_seconds)
        return token

    def verify(self, token: str) -> bool:
        if not token:
            return False
        return self.client.getex(self._key(token), ex=self.ttl_seconds) is not None

    def revoke(self, token: str) -> None:
        self.client.delete(self._key(token))

    def sweep(self) -> int:
        return 0


def build_admin_token_store(settings: Settings) -> AdminTokenStore:
    """Select the store backend from ADMIN_TOKEN_STORE"""
    if settings.ADMIN_TOKEN_STORE.lower() == "redis":
        client = redis.Redis.from_url(settings.get_redis_url(), decode_responses=True)
        logger.info("Admin tokens stored in Redis")
        return RedisAdminTokenStore(client, ttl_seconds=settings.ADMIN_TOKEN_TTL_SEC)

    return InMemoryAdminTokenStore(ttl_seconds=settings.ADMIN_TOKEN_TTL_SEC)


class AdminTokenSweeper:
    """Background task purging expired admin tokens at a fixed interval"""

    def __init__(self, store: AdminTokenStore, interval_seconds: float):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                removed = await run_in_threadpool(self.store.sweep)
            except redis.RedisError as e:
                logger.error(f"Admin token sweep failed: {e}")
                continue
            if removed:
                logger.info(f"Swept {removed} expired admin token(s)")

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
