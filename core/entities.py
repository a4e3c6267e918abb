# core/entities.py
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol
from model.curriculum import WorkItem
from model.run import RunState


@dataclass(frozen=True)
class CourseContext:
    course_id: int
    course_title: str


@dataclass
class Archive:
    """
    A packed transcript bundle: archive file name, the name -> text layout that
    went into it, and the zip bytes.
    """

    name: str
    files: Dict[str, str] = field(default_factory=dict)
    data: bytes = b""


@dataclass(frozen=True)
class RunPlan:
    # initialize=True: fetch a fresh curriculum before looping
    initialize: bool
    run_id: int = 0


@dataclass(frozen=True)
class Decision:
    # transitioned: the command persisted a status change (or a context error)
    transitioned: bool
    plan: Optional[RunPlan] = None


class RunStateStore(Protocol):
    async def get(self) -> RunState: ...

    async def set(self, state: RunState) -> RunState: ...

    async def update(self, mutate: Callable[[RunState], RunState]) -> RunState: ...

    def subscribe(self, listener: Callable[[RunState], None]) -> Callable[[], None]: ...


class DeliverySink(Protocol):
    async def deliver(self, name: str, data: bytes) -> None: ...

    async def discard(self) -> int: ...


class CourseSource(Protocol):
    async def fetch_curriculum(self, course_id: int) -> List[WorkItem]: ...

    async def fetch_transcript(self, course_id: int, lecture_id: int) -> Optional[str]: ...


ContextExtractor = Callable[[], CourseContext]
