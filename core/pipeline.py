# core/pipeline.py
import asyncio
import itertools
import logging
from typing import Callable, Optional, Sequence
from core import archive
from core.captions import vtt_to_text
from core.entities import (
    Archive,
    ContextExtractor,
    CourseSource,
    Decision,
    DeliverySink,
    RunPlan,
    RunStateStore,
)
from model.curriculum import WorkItem
from model.run import RESTARTABLE, RunState, RunStatus
from util.constants import NO_TRANSCRIPT_MARKER
from util.enums import CommandAction
from util.errors import ArchiveError, ContextError, ItemProcessingError
from util.timing import timed

logger = logging.getLogger(__name__)

Assembler = Callable[[Sequence[WorkItem], str], Archive]


def _with(state: RunState, **changes) -> RunState:
    return state.model_copy(update=changes)


def _append_log(state: RunState, line: str, **changes) -> RunState:
    return _with(state, log=[*state.log, line], **changes).touched()


def _complete_item(state: RunState, index: int, item_id: int, content: str) -> RunState:
    items = list(state.items)
    if index >= len(items) or items[index].id != item_id:
        # Order is fixed after initialization; anything else is a foreign write.
        raise RuntimeError(f"curriculum changed under item {item_id}")
    items[index] = items[index].mark_processed(content)
    done = _with(state, items=items)
    return _with(done, completedCount=done.count_completed()).touched()


class PipelineEngine:
    """
    State machine for one transcript run.

    Commands go through `decide()` (or `accept()` for just the plan), which
    decides the transition and persists it. When it yields a RunPlan the caller
    drives `run(plan)` (usually as a background task): optional curriculum
    initialization, the sequential item loop, then archive assembly and delivery.

    The loop never trusts a local copy of the run: it re-reads the store before
    every item and stops when the persisted status is no longer `running`, so a
    PAUSE written by anyone (even another process) takes effect at the next
    item boundary. Each processed item is checkpointed before moving on.
    """

    def __init__(
        self,
        store: RunStateStore,
        source: CourseSource,
        sink: DeliverySink,
        assemble: Assembler = archive.assemble,
    ) -> None:
        self._store = store
        self._source = source
        self._sink = sink
        self._assemble = assemble
        # Guards decide() against the loop's own stop/finish decisions.
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)
        self._active_run: Optional[int] = None

    @property
    def is_looping(self) -> bool:
        return self._active_run is not None

    # ---------------- Commands ----------------

    async def decide(
        self, action: CommandAction, extractor: Optional[ContextExtractor] = None
    ) -> Decision:
        """Apply one command; the Decision says whether it changed the run."""
        async with self._lock:
            state = await self._store.get()
            logger.info("run.command action=%s status=%s", action.value, state.status.value)
            match action:
                case CommandAction.START:
                    if state.status in RESTARTABLE:
                        return Decision(True, await self._claim(extractor))
                case CommandAction.RESUME:
                    if state.status is RunStatus.paused:
                        return Decision(True, await self._resume(state))
                    if state.status in RESTARTABLE:
                        return Decision(True, await self._claim(extractor))
                case CommandAction.PAUSE:
                    if state.status is RunStatus.running:
                        await self._store.update(self._pause)
                        logger.info("run.pause.requested completed=%d", state.completedCount)
                        return Decision(True)
            logger.info("run.command.noop action=%s status=%s", action.value, state.status.value)
            return Decision(False)

    async def accept(
        self, action: CommandAction, extractor: Optional[ContextExtractor] = None
    ) -> Optional[RunPlan]:
        return (await self.decide(action, extractor)).plan

    async def handle(
        self, action: CommandAction, extractor: Optional[ContextExtractor] = None
    ) -> RunState:
        """accept() and, if a run was planned, drive it to the next quiescent state."""
        plan = await self.accept(action, extractor)
        if plan is None:
            return await self._store.get()
        return await self.run(plan)

    async def recover_interrupted(self) -> bool:
        """
        A persisted `running` status with no loop in this process means the
        previous process died mid-run. Park it as paused so RESUME continues
        from the last checkpoint.
        """
        async with self._lock:
            state = await self._store.get()
            if state.status is not RunStatus.running or self.is_looping:
                return False
            await self._store.update(
                lambda s: _with(
                    s, status=RunStatus.paused, currentTask="Interrupted. Resume to continue."
                )
            )
        logger.warning("run.recovered course=%s completed=%d", state.courseId, state.completedCount)
        return True

    @staticmethod
    def _pause(state: RunState) -> RunState:
        if state.status is not RunStatus.running:
            return state
        return _with(state, status=RunStatus.paused, currentTask="Pausing...")

    def _plan(self, initialize: bool) -> RunPlan:
        plan = RunPlan(initialize=initialize, run_id=next(self._ids))
        self._active_run = plan.run_id
        return plan

    async def _resume(self, state: RunState) -> Optional[RunPlan]:
        # No curriculum checkpoint: the run died before loading it, so start over.
        reload = not state.items and not self.is_looping
        task = "Fetching Curriculum..." if reload else "Resuming..."
        await self._store.update(
            lambda s: _with(s, status=RunStatus.running, currentTask=task)
        )
        if self.is_looping:
            # The loop has not reached its next checkpoint yet and will carry on.
            return None
        if reload:
            logger.info("run.resume.reload course=%s", state.courseId)
        return self._plan(initialize=reload)

    async def _claim(self, extractor: Optional[ContextExtractor]) -> Optional[RunPlan]:
        try:
            if extractor is None:
                raise ContextError("No course page supplied")
            ctx = extractor()
        except ContextError as e:
            logger.warning("run.context.error err=%s", e)
            await self._store.update(
                lambda s: _append_log(
                    s, f"Error: {e}", status=RunStatus.error, currentTask=f"Error: {e}"
                )
            )
            return None

        def reset(state: RunState) -> RunState:
            return RunState(
                status=RunStatus.running,
                courseId=ctx.course_id,
                courseTitle=ctx.course_title,
                currentTask="Fetching Curriculum...",
                lastUpdatedAt=state.lastUpdatedAt,
                version=state.version,
            ).touched()

        await self._store.update(reset)
        logger.info("run.claimed course=%d", ctx.course_id)
        return self._plan(initialize=True)

    # ---------------- Run ----------------

    async def run(self, plan: RunPlan) -> RunState:
        try:
            if plan.initialize:
                await self._initialize()
            if not await self._process_items(plan):
                return await self._store.get()
            return await self._finalize(plan)
        except Exception as e:
            return await self._fail(plan, e)
        finally:
            if self._active_run == plan.run_id:
                self._active_run = None

    async def _initialize(self) -> None:
        state = await self._store.get()
        if state.courseId is None:
            raise ContextError("Course ID not available. Cannot proceed with download.")
        # A previous course's archive must not be served for this run.
        await self._sink.discard()
        items = await self._source.fetch_curriculum(state.courseId)
        total = sum(1 for i in items if i.is_fetchable)
        await self._store.update(
            lambda s: _append_log(
                s,
                "Curriculum loaded",
                items=items,
                totalVideoLectures=total,
                completedCount=0,
                currentTask="Starting download...",
            )
        )
        logger.info("run.initialized course=%d items=%d lectures=%d", state.courseId, len(items), total)

    async def _checkpoint(self, plan: RunPlan) -> Optional[RunState]:
        """Fresh state if the run should continue, else None (and the loop is released)."""
        state = await self._store.get()
        if state.status is RunStatus.running:
            return state
        async with self._lock:
            state = await self._store.get()
            if state.status is RunStatus.running:
                return state
            if state.status is RunStatus.paused:
                await self._store.update(lambda s: _with(s, currentTask="Paused by user."))
                logger.info("run.paused completed=%d/%d", state.completedCount, state.totalVideoLectures)
            if self._active_run == plan.run_id:
                self._active_run = None
            return None

    async def _process_items(self, plan: RunPlan) -> bool:
        """Walk the curriculum in stored order. True when every item was visited."""
        index = 0
        while True:
            state = await self._checkpoint(plan)
            if state is None:
                return False
            if index >= len(state.items):
                return True
            item = state.items[index]
            if item.needs_processing:
                await self._process_item(state.courseId, index, item)
            index += 1

    async def _process_item(self, course_id: int, index: int, item: WorkItem) -> None:
        await self._store.update(lambda s: _with(s, currentTask=f"Processing: {item.title}"))
        try:
            with timed(logger, "run.item", lecture=item.id):
                raw = await self._source.fetch_transcript(course_id, item.id)
                text = vtt_to_text(raw) if raw else ""
        except Exception as e:
            err = ItemProcessingError(item.title, e)
            logger.warning("run.item.error lecture=%d err=%s", item.id, err)
            await self._store.update(lambda s: _append_log(s, f"Error on {err}"))
            return

        content = text or NO_TRANSCRIPT_MARKER
        saved = await self._store.update(lambda s: _complete_item(s, index, item.id, content))
        logger.info(
            "run.item.saved lecture=%d completed=%d/%d",
            item.id,
            saved.completedCount,
            saved.totalVideoLectures,
        )

    async def _finalize(self, plan: RunPlan) -> RunState:
        state = await self._store.update(lambda s: _with(s, currentTask="Zipping files..."))
        bundle = self._assemble(state.items, state.courseTitle)
        try:
            await self._sink.deliver(bundle.name, bundle.data)
        except Exception as e:
            raise ArchiveError(f"Could not deliver archive: {e}") from e

        return await self._finish(
            plan,
            lambda s: _append_log(
                s,
                f"Archive ready: {bundle.name}",
                status=RunStatus.completed,
                currentTask="Download Finished",
                archiveName=bundle.name,
            ),
        )

    async def _fail(self, plan: RunPlan, e: Exception) -> RunState:
        logger.error("run.failed err=%s: %s", type(e).__name__, e)
        return await self._finish(
            plan,
            lambda s: _append_log(s, f"Error: {e}", status=RunStatus.error, currentTask=f"Error: {e}"),
        )

    async def _finish(self, plan: RunPlan, mutate: Callable[[RunState], RunState]) -> RunState:
        async with self._lock:
            final = await self._store.update(mutate)
            if self._active_run == plan.run_id:
                self._active_run = None
        logger.info(
            "run.finished status=%s completed=%d/%d",
            final.status.value,
            final.completedCount,
            final.totalVideoLectures,
        )
        return final
