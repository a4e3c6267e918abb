# util/constants.py
from typing import Final

NO_TRANSCRIPT_MARKER: Final[str] = "> [No Transcript Available]"
DEFAULT_CHAPTER_DIR: Final[str] = "00_Intro"
UNTITLED: Final[str] = "untitled"


class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    RUN = V1 + "/run"
    RUN_COMMAND = RUN + "/command"
    RUN_STATE = RUN + "/state"
    RUN_STREAM = RUN + "/stream"
    RUN_ARCHIVE = RUN + "/archive"


class ExternalURIs:
    API = "/api-2.0"
    CURRICULUM = API + "/courses/{course_id}/subscriber-curriculum-items/"
    LECTURE = API + "/users/me/subscribed-courses/{course_id}/lectures/{lecture_id}/"
