# service/run_service.py
import asyncio
import logging
from typing import AsyncIterator, Optional, Tuple
from core.course_context import fixed_context_extractor, page_context_extractor
from core.entities import ContextExtractor, RunPlan
from core.pipeline import PipelineEngine
from core.streaming import make_state_stream
from model.api import CommandRequest, CommandResponse, RunStateView
from repository.archive_repository import ArchiveRepository
from repository.run_state_repository import RunStateRepository
from util.enums import ErrorMessage
from util.errors import AppError

logger = logging.getLogger(__name__)


class RunService:
    """
    Process-wide entry point for the control surface.

    Owns the engine and the single background task running its loop. Commands
    are answered as soon as the transition is persisted; progress is observed
    through `state()` or `stream()`.
    """

    def __init__(
        self,
        engine: PipelineEngine,
        runs: RunStateRepository,
        archives: ArchiveRepository,
    ) -> None:
        self._engine = engine
        self._runs = runs
        self._archives = archives
        self._task: Optional[asyncio.Task] = None

    @staticmethod
    def _extractor_for(req: CommandRequest) -> Optional[ContextExtractor]:
        if req.pageHtml:
            return page_context_extractor(req.pageHtml)
        if req.courseId is not None:
            return fixed_context_extractor(req.courseId, req.courseTitle)
        return None

    async def command(self, req: CommandRequest) -> CommandResponse:
        decision = await self._engine.decide(req.action, self._extractor_for(req))
        if decision.plan is not None:
            self._spawn(decision.plan)
        return CommandResponse(
            accepted=decision.transitioned,
            state=RunStateView.of(await self._runs.get()),
        )

    def _spawn(self, plan: RunPlan) -> None:
        task = asyncio.create_task(self._engine.run(plan), name=f"transcript-run-{plan.run_id}")
        task.add_done_callback(self._on_done)
        self._task = task
        logger.info("run.task.spawned run=%d initialize=%s", plan.run_id, plan.initialize)

    @staticmethod
    def _on_done(task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("run.task.cancelled name=%s", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("run.task.crashed name=%s", task.get_name(), exc_info=exc)

    async def state(self) -> RunStateView:
        return RunStateView.of(await self._runs.get())

    def stream(self, follow: bool = True) -> AsyncIterator[bytes]:
        return make_state_stream(self._runs, follow=follow)

    async def archive(self) -> Tuple[str, bytes]:
        found = await self._archives.latest()
        if found is None:
            raise AppError(
                ErrorMessage.ARCHIVE_NOT_FOUND.value.message,
                ErrorMessage.ARCHIVE_NOT_FOUND.value.http_status,
            )
        return found

    async def join(self) -> None:
        """Wait for the current loop, if any, to reach a quiescent state."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def recover(self) -> bool:
        return await self._engine.recover_interrupted()

    async def shutdown(self) -> None:
        """Stop the loop; the persisted `running` status is recovered on next start."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("run.task.stopped name=%s", task.get_name())
