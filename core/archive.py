# core/archive.py
import io
import logging
import zipfile
from typing import Dict, Sequence
from config.settings import settings
from core.entities import Archive
from model.curriculum import ItemKind, WorkItem
from util.constants import DEFAULT_CHAPTER_DIR
from util.errors import ArchiveError
from util.functions import sanitize_file_name, two_digits
from util.timing import timed

logger = logging.getLogger(__name__)

# Fixed entry timestamp: identical layouts pack to identical bytes.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def _safe(name: str) -> str:
    return sanitize_file_name(name, max_length=settings.FILENAME_MAX_LENGTH)


def build_layout(items: Sequence[WorkItem], course_title: str) -> Dict[str, str]:
    """
    Map archive paths to file contents, in insertion order.

    Lectures before the first chapter land in 00_Intro. Chapter directories are
    numbered from 00 in curriculum order and lecture files from 01 within their
    chapter; only lectures with content get a file (and a number). The merged
    document "<course>_Full.md" is always added last.
    """
    files: Dict[str, str] = {}
    merged = [f"# {course_title}\n\n"]
    chapter_dir = DEFAULT_CHAPTER_DIR
    chapters = 0
    lectures = 0

    for item in items:
        match item.kind:
            case ItemKind.chapter:
                chapter_dir = f"{two_digits(chapters)}_{_safe(item.title)}"
                chapters += 1
                lectures = 0
                merged.append(f"\n\n## {chapters}. {item.title}\n\n")
            case ItemKind.lecture:
                if not item.content:
                    continue
                lectures += 1
                path = f"{chapter_dir}/{two_digits(lectures)}_{_safe(item.title)}.md"
                files[path] = item.content
                merged.append(f"### {lectures}. {item.title}\n\n{item.content}\n\n---\n\n")
            case ItemKind.quiz | ItemKind.other:
                continue

    files[f"{_safe(course_title)}_Full.md"] = "".join(merged)
    return files


def pack(files: Dict[str, str], level: int = settings.ARCHIVE_COMPRESSION_LEVEL) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=level) as bundle:
        for path, text in files.items():
            info = zipfile.ZipInfo(path, date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            bundle.writestr(info, text.encode("utf-8"), compresslevel=level)
    return buf.getvalue()


def archive_name(course_title: str) -> str:
    return f"{_safe(course_title)}_Transcripts.zip"


def assemble(items: Sequence[WorkItem], course_title: str) -> Archive:
    """Lay out and pack the transcripts; any failure surfaces as ArchiveError."""
    try:
        with timed(logger, "archive.assemble", items=len(items)):
            files = build_layout(items, course_title)
            data = pack(files)
    except Exception as e:
        logger.error("archive.pack.error err=%s", type(e).__name__)
        raise ArchiveError(f"Could not build archive: {e}") from e

    name = archive_name(course_title)
    logger.info("archive.ready name=%s files=%d bytes=%d", name, len(files), len(data))
    return Archive(name=name, files=files, data=data)
