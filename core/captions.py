# core/captions.py
import re
from typing import Iterator

_TIMESTAMP = re.compile(r"^\d{2}:\d{2}")
_CUE_TAG = re.compile(r"</?[a-zA-Z][^>]*>")
_WS = re.compile(r"\s+")


def _spoken_lines(vtt_raw: str) -> Iterator[str]:
    for line in vtt_raw.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("WEBVTT"):
            continue
        if _TIMESTAMP.match(trimmed) or "-->" in trimmed:
            continue
        yield trimmed


def vtt_to_text(vtt_raw: str) -> str:
    """
    Flatten a WebVTT caption document into one paragraph of plain text:
    header, cue timings and blank lines are dropped, inline cue tags such as
    <v Speaker> or <c.yellow> are removed, whitespace is collapsed.
    Returns "" for an empty document.
    """
    if not vtt_raw:
        return ""
    text = " ".join(_CUE_TAG.sub("", line) for line in _spoken_lines(vtt_raw))
    return _WS.sub(" ", text).strip()
