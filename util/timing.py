# util/timing.py
import time
from contextlib import contextmanager
from typing import Iterator, Any
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "course.curriculum", course=42):
          ...
    Emits one INFO on success ("<name>.done ms=<int> key=val ...") and one
    WARNING when the block raises ("<name>.failed ms=<int> ..."). The error is re-raised.
    """
    t0 = time.perf_counter()
    suffix = "".join(f" {k}={v}" for k, v in kv.items())
    try:
        yield
    except Exception:
        logger.warning("%s.failed ms=%d%s", name, _elapsed_ms(t0), suffix)
        raise
    logger.info("%s.done ms=%d%s", name, _elapsed_ms(t0), suffix)


def _elapsed_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)
