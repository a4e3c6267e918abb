# util/errors.py
from fastapi import HTTPException, status


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)


class PipelineError(Exception):
    """Base class for failures raised while driving a transcript run."""


class ContextError(PipelineError):
    """The current page does not identify a course session."""


class RemoteError(PipelineError):
    """The course service answered a lookup with a failure."""


class TranscriptUnavailable(PipelineError):
    # Not a failure: the lecture legitimately has no usable caption track.
    pass


class ItemProcessingError(PipelineError):
    def __init__(self, title: str, cause: BaseException) -> None:
        super().__init__(f"{title}: {str(cause) or type(cause).__name__}")
        self.title = title
        self.cause = cause


class ArchiveError(PipelineError):
    """Packing or delivering the transcript archive failed."""
