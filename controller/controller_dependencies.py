# controller/controller_dependencies.py
from functools import lru_cache
from core.course_client import CourseClient
from core.pipeline import PipelineEngine
from repository.archive_repository import ArchiveRepository
from repository.run_state_repository import RunStateRepository
from service.run_service import RunService


@lru_cache(maxsize=1)
def get_run_service() -> RunService:
    # One service per process: it owns the only pipeline loop.
    _runs = RunStateRepository()
    _archives = ArchiveRepository()
    _engine = PipelineEngine(store=_runs, source=CourseClient(), sink=_archives)
    return RunService(_engine, _runs, _archives)
