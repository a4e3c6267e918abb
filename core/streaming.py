# core/streaming.py
import asyncio
import json
import logging
from typing import AsyncIterator, Dict, Final
from core.entities import RunStateStore
from model.api import RunStateView
from model.run import RunState, RunStatus

LINE_SEP: Final[str] = "\n"
QUIESCENT: Final[frozenset] = frozenset(
    {RunStatus.idle, RunStatus.paused, RunStatus.completed, RunStatus.error}
)
logger = logging.getLogger(__name__)


def ndjson_line(obj: Dict[str, object]) -> bytes:
    return (json.dumps(obj, separators=(",", ":")) + LINE_SEP).encode("utf-8")


def _event(state: RunState) -> bytes:
    return ndjson_line({"type": "state", "payload": RunStateView.of(state).model_dump(mode="json")})


async def make_state_stream(
    store: RunStateStore, *, follow: bool = True, heartbeat_seconds: float = 15.0
) -> AsyncIterator[bytes]:
    """
    Emit NDJSON run snapshots:
      - the current state immediately
      - one line per store write while `follow` is set
      - a heartbeat line when nothing changed for `heartbeat_seconds`
    Ends with a "done" line once the run is in a quiescent state and follow=False.
    """
    queue: asyncio.Queue[RunState] = asyncio.Queue()
    unsubscribe = store.subscribe(queue.put_nowait)
    try:
        current = await store.get()
        yield _event(current)
        if not follow and current.status in QUIESCENT:
            yield ndjson_line({"type": "done"})
            return

        while True:
            try:
                state = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield ndjson_line({"type": "heartbeat"})
                continue
            yield _event(state)
            if not follow and state.status in QUIESCENT:
                yield ndjson_line({"type": "done"})
                return
    finally:
        unsubscribe()
        logger.debug("stream.closed")
