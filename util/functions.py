# util/functions.py
import re
from util.constants import UNTITLED

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9 \-_]")


def sanitize_file_name(name: str, max_length: int = 100) -> str:
    """
    - Fold runs of whitespace (tabs, newlines) into one space.
    - Drop everything except letters, digits, space, hyphen and underscore.
    - Trim, then cap at `max_length` characters.
    - Falls back to "untitled" when nothing survives.
    """
    cleaned = _UNSAFE_CHARS.sub("", _WHITESPACE.sub(" ", name or "")).strip()[:max_length]
    return cleaned or UNTITLED


def progress_percent(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(100 * completed / total)


def two_digits(n: int) -> str:
    return str(n).zfill(2)
