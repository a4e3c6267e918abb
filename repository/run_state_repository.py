# repository/run_state_repository.py
import logging
from typing import Callable, Final, List, Optional
from redis.asyncio import Redis
from config.cache import get_redis
from model.run import RunState
from repository.namespaces import RUN_EVENTS, RUN_STATE

KEY: Final[str] = RUN_STATE
CHANNEL: Final[str] = RUN_EVENTS

logger = logging.getLogger(__name__)

Listener = Callable[[RunState], None]


class RunStateRepository:
    """
    Flow:
    - One JSON document under a fixed key holds the whole RunState; no TTL, it is
      overwritten in place and never deleted.
    - Every write bumps `version`, publishes the new state on a channel and
      notifies in-process listeners.
    - Writers call `update()` so each write starts from a fresh read.
    """

    def __init__(self, client: Optional[Redis] = None) -> None:
        self._redis = client
        self._listeners: List[Listener] = []

    async def _client(self) -> Redis:
        if self._redis is not None:
            return self._redis
        return await get_redis()

    async def get(self) -> RunState:
        r = await self._client()
        raw = await r.get(KEY)
        if raw is None:
            return RunState.default()
        try:
            return RunState.model_validate_json(raw)
        except ValueError:
            logger.error("run.state.corrupt bytes=%d", len(raw))
            return RunState.default()

    async def set(self, state: RunState) -> RunState:
        stored = state.model_copy(update={"version": state.version + 1})
        payload = stored.model_dump_json().encode("utf-8")
        r = await self._client()
        await r.set(KEY, payload)
        await r.publish(CHANNEL, payload)
        self._notify(stored)
        return stored

    async def update(self, mutate: Callable[[RunState], RunState]) -> RunState:
        current = await self.get()
        return await self.set(mutate(current))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: RunState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                # An observer must never break a checkpoint write
                logger.exception("run.state.listener.error")
