"""Redis infrastructure with graceful degradation."""

from types import TracebackType

import redis.asyncio as aioredis
import structlog
from redis.exceptions import LockError

from cart_reminder.config import get_settings

logger = structlog.get_logger()

_redis_client: aioredis.Redis | None = None


async def create_redis_client() -> aioredis.Redis | None:
    """Connect a new async Redis client, or return None if Redis is unreachable."""
    settings = get_settings()
    try:
        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=2,
            socket_timeout=2,
            retry_on_timeout=True,
        )
        await client.ping()
        logger.info("Redis connection established")
        return client
    except Exception as e:
        logger.warning("Redis unavailable, run locking disabled", error=str(e))
        return None


async def get_redis_client() -> aioredis.Redis | None:
    """Get or create the global async Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = await create_redis_client()
    return _redis_client


async def close_redis() -> None:
    """Close the Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


class RunLock:
    """Non-blocking distributed lock around a periodic run.

    Acquisition never waits: if another holder owns the key the caller is told
    so and should skip its run. Without Redis the lock is always granted.
    """

    def __init__(self, client: aioredis.Redis | None, name: str, ttl_seconds: int = 900):
        self.client = client
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._lock = None
        self.acquired = False

    async def acquire(self) -> bool:
        if not self.client:
            logger.warning("Run lock degraded, Redis not available", lock=self.name)
            self.acquired = True
            return True
        try:
            self._lock = self.client.lock(
                self.name, timeout=self.ttl_seconds, blocking=False
            )
            self.acquired = bool(await self._lock.acquire())
        except Exception as e:
            logger.warning("Run lock acquire failed, proceeding unlocked", lock=self.name, error=str(e))
            self._lock = None
            self.acquired = True
        return self.acquired

    async def release(self) -> None:
        if self._lock is None or not self.acquired:
            self.acquired = False
            return
        try:
            await self._lock.release()
        except LockError:
            # Expired before we finished; someone else may hold it now
            logger.warning("Run lock expired before release", lock=self.name)
        except Exception as e:
            logger.warning("Run lock release failed", lock=self.name, error=str(e))
        finally:
            self._lock = None
            self.acquired = False

    async def __aenter__(self) -> "RunLock":
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()
