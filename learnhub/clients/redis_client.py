"""
Redis client for named locks.

Used to serialize quiz saves (delete-then-reinsert) and attempt submissions
across workers. Without a configured Redis URL the locks are process-local,
which still serializes callers inside one process.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from learnhub.config import Settings
from learnhub.utils.exceptions import PersistenceException

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client for locking"""

    LOCK_TTL = 60  # seconds before a crashed holder's lock expires

    def __init__(self, settings: Settings):
        self._redis_url = settings.redis_url
        self._wait_timeout = settings.quiz_lock_timeout
        self._client: Optional[Redis] = None
        self._local_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    async def connect(self):
        """Establish Redis connection"""
        if not self._redis_url:
            logger.warning("Redis URL not configured, using process-local locks")
            return

        try:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True
            )
            await self._client.ping()
            logger.info("Redis connection established successfully")
        except RedisError as e:
            logger.error(f"Failed to connect to Redis, using process-local locks: {e}")
            self._client = None

    async def disconnect(self):
        """Close Redis connection"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    def is_available(self) -> bool:
        """Check if Redis is available"""
        return self._client is not None

    async def ping(self) -> bool:
        if not self.is_available():
            return False
        try:
            return await self._client.ping()
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    # =============================
    #   Named locks
    # =============================
    @staticmethod
    def quiz_lock_key(lesson_id: str) -> str:
        return f"quiz:lock:{lesson_id}"

    @staticmethod
    def attempt_lock_key(attempt_id: str) -> str:
        return f"attempt:lock:{attempt_id}"

    @asynccontextmanager
    async def acquire_lock(self, name: str, timeout: Optional[int] = None):
        """
        Hold the named lock for the duration of the block, waiting up to
        ``timeout`` seconds for it.

        Raises:
            PersistenceException: If the lock could not be acquired in time
        """
        timeout = timeout if timeout is not None else self._wait_timeout

        if not self.is_available():
            async with self._local_lock(name, timeout):
                yield
            return

        lock = self._client.lock(name, timeout=self.LOCK_TTL, blocking_timeout=timeout)
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            raise PersistenceException(f"Lock service unavailable for {name}") from e
        if not acquired:
            raise PersistenceException(f"Timed out waiting for lock {name}")

        logger.debug(f"Acquired lock {name}")
        try:
            yield
        finally:
            try:
                await lock.release()
                logger.debug(f"Released lock {name}")
            except LockError:
                # Expired while held
                logger.warning(f"Lock {name} expired before release")

    @asynccontextmanager
    async def _local_lock(self, name: str, timeout: int):
        lock = self._local_locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._local_locks[name] = lock

        try:
            await asyncio.wait_for(lock.acquire(), timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceException(f"Timed out waiting for lock {name}") from e

        try:
            yield
        finally:
            lock.release()
