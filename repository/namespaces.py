# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "transcriptdl"

RUN_STATE: Final[str] = f"{ROOT}:run"  # the single run record
RUN_EVENTS: Final[str] = f"{ROOT}:run:events"  # pub/sub channel, one message per write
ARCHIVES: Final[str] = f"{ROOT}:archives"
