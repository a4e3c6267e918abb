# config/cache.py
import logging
from typing import Optional
from redis.asyncio import Redis, from_url
from config.settings import settings

logger = logging.getLogger(__name__)

_client: Optional[Redis] = None


async def get_redis() -> Redis:
    """
    Process-wide client for the run record and the archive. Payloads are stored
    as raw bytes (zip data included), so responses are never decoded here.
    """
    global _client
    if _client is None:
        client = from_url(
            settings.REDIS_URL,
            decode_responses=False,
            socket_keepalive=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            health_check_interval=settings.REDIS_HEALTH_CHECK_SECONDS,
        )
        # Unreachable Redis fails startup.
        await client.ping()
        _client = client
        logger.info("redis.connected health_check=%ds", settings.REDIS_HEALTH_CHECK_SECONDS)
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("redis.closed")
