# model/run.py
import time
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from model.curriculum import ItemKind, WorkItem
from util.functions import progress_percent


class RunStatus(str, Enum):
    idle = "idle"
    running = "running"
    paused = "paused"
    completed = "completed"
    error = "error"


# Statuses from which START (or an equivalent RESUME) re-initializes the run.
RESTARTABLE = frozenset({RunStatus.idle, RunStatus.completed, RunStatus.error})


class RunState(BaseModel):
    """
    The single persisted record for the current (or most recent) run.

    The pipeline is the only writer of items and counters while running; the
    control surface only requests status transitions.
    """

    status: RunStatus = RunStatus.idle
    courseId: Optional[int] = None
    courseTitle: str = "Ready"
    totalVideoLectures: int = 0
    completedCount: int = 0
    currentTask: str = "Idle"
    log: List[str] = Field(default_factory=list)
    items: List[WorkItem] = Field(default_factory=list)
    lastUpdatedAt: float = 0.0
    version: int = 0
    archiveName: Optional[str] = None

    @classmethod
    def default(cls) -> "RunState":
        return cls()

    @property
    def progress_percent(self) -> int:
        return progress_percent(self.completedCount, self.totalVideoLectures)

    def count_completed(self) -> int:
        return sum(
            1 for i in self.items if i.kind is ItemKind.lecture and i.completed
        )

    def touched(self) -> "RunState":
        """Return a copy stamped now, never moving the timestamp backwards."""
        return self.model_copy(
            update={"lastUpdatedAt": max(self.lastUpdatedAt, time.time())}
        )
