# repository/archive_repository.py
from typing import Optional, Tuple
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from repository.namespaces import ARCHIVES


class ArchiveRepository:
    """
    Redis-backed delivery sink for the finished transcript archive.

    Only the latest archive is kept; TTL is refreshed when it is read.
    """

    def __init__(
        self,
        client: Optional[Redis] = None,
        ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS,
    ) -> None:
        self._redis = client
        self._ttl = int(ttl_seconds)

    async def _client(self) -> Redis:
        if self._redis is not None:
            return self._redis
        return await get_redis()

    @staticmethod
    def _key() -> str:
        return f"{ARCHIVES}:latest"

    async def deliver(self, name: str, data: bytes) -> None:
        r = await self._client()
        await r.hset(self._key(), mapping={"name": name.encode("utf-8"), "data": data})
        await r.expire(self._key(), self._ttl)

    async def latest(self) -> Optional[Tuple[str, bytes]]:
        r = await self._client()
        h = await r.hgetall(self._key())
        if not h or b"data" not in h:
            return None
        await r.expire(self._key(), self._ttl)
        name = h.get(b"name") or b"transcripts.zip"
        return name.decode("utf-8"), h[b"data"]

    async def discard(self) -> int:
        r = await self._client()
        return int(await r.delete(self._key()))
