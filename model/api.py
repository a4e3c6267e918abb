# model/api.py
from pydantic import BaseModel, Field
from model.run import RunState, RunStatus
from util.enums import CommandAction


class CommandRequest(BaseModel):
    action: CommandAction
    # Course-taking page markup; START/RESUME read the course identity from it.
    pageHtml: str | None = None
    courseId: int | None = Field(default=None, gt=0)
    courseTitle: str | None = None


class RunStateView(BaseModel):
    status: RunStatus
    courseId: int | None = None
    courseTitle: str
    currentTask: str
    completedCount: int
    totalVideoLectures: int
    progressPercent: int
    log: list[str]
    lastUpdatedAt: float
    archiveName: str | None = None

    @classmethod
    def of(cls, state: RunState) -> "RunStateView":
        return cls(
            status=state.status,
            courseId=state.courseId,
            courseTitle=state.courseTitle,
            currentTask=state.currentTask,
            completedCount=state.completedCount,
            totalVideoLectures=state.totalVideoLectures,
            progressPercent=state.progress_percent,
            log=list(state.log),
            lastUpdatedAt=state.lastUpdatedAt,
            archiveName=state.archiveName,
        )


class CommandResponse(BaseModel):
    accepted: bool
    state: RunStateView
