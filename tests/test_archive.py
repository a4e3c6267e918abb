from __future__ import annotations

import io
import zipfile

import pytest

from core import archive
from fakes import chapter, lecture
from model.curriculum import ItemKind, WorkItem
from util.errors import ArchiveError


def _done(item: WorkItem, content: str) -> WorkItem:
    return item.mark_processed(content)


def test_layout_for_two_chapter_course() -> None:
    items = [
        chapter(1, "Intro"),
        _done(lecture(11, "Welcome"), "Welcome text"),
        chapter(2, "Basics"),
        _done(lecture(21, "Vars"), "Vars text"),
    ]

    files = archive.build_layout(items, "My Course")

    assert list(files) == [
        "00_Intro/01_Welcome.md",
        "01_Basics/01_Vars.md",
        "My Course_Full.md",
    ]
    assert files["00_Intro/01_Welcome.md"] == "Welcome text"
    merged = files["My Course_Full.md"]
    assert merged.startswith("# My Course\n\n")
    assert merged.index("### 1. Welcome\n\nWelcome text") < merged.index("### 1. Vars\n\nVars text")
    assert "## 1. Intro" in merged and "## 2. Basics" in merged


def test_orphan_lectures_go_to_default_directory() -> None:
    items = [
        _done(lecture(1, "Before anything"), "early"),
        chapter(2, "Setup"),
        _done(lecture(3, "Install"), "install"),
        _done(lecture(4, "Configure"), "configure"),
    ]

    files = archive.build_layout(items, "Course")

    assert "00_Intro/01_Before anything.md" in files
    assert "00_Setup/01_Install.md" in files
    assert "00_Setup/02_Configure.md" in files


def test_lectures_without_content_and_quizzes_get_no_file() -> None:
    items = [
        chapter(1, "Only"),
        lecture(2, "Pending"),
        WorkItem(kind=ItemKind.quiz, id=3, title="Quiz"),
        _done(lecture(4, "Done"), "text"),
    ]

    files = archive.build_layout(items, "Course")

    # numbering only counts lectures that produced a file
    assert list(files) == ["00_Only/01_Done.md", "Course_Full.md"]
    assert "Pending" not in files["Course_Full.md"]


def test_file_names_are_sanitized() -> None:
    items = [chapter(1, "A/B: Intro?!"), _done(lecture(2, "???"), "x")]

    files = archive.build_layout(items, "C++ / Deep Dive")

    assert "00_AB Intro/01_untitled.md" in files
    assert "C  Deep Dive_Full.md" in files


def test_assemble_is_byte_identical_for_same_input() -> None:
    items = [chapter(1, "Intro"), _done(lecture(11, "Welcome"), "Welcome text")]

    first = archive.assemble(items, "Course")
    second = archive.assemble(list(items), "Course")

    assert first.name == "Course_Transcripts.zip"
    assert first.files == second.files
    assert first.data == second.data


def test_packed_zip_round_trips_layout() -> None:
    items = [chapter(1, "Intro"), _done(lecture(11, "Welcome"), "Grüße")]

    bundle = archive.assemble(items, "Course")

    with zipfile.ZipFile(io.BytesIO(bundle.data)) as zf:
        assert zf.namelist() == list(bundle.files)
        assert zf.read("00_Intro/01_Welcome.md").decode("utf-8") == "Grüße"
        assert zf.getinfo("00_Intro/01_Welcome.md").compress_type == zipfile.ZIP_DEFLATED


def test_pack_failure_surfaces_as_archive_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(files, level=6):
        raise zipfile.LargeZipFile("too big")

    monkeypatch.setattr(archive, "pack", _broken)

    with pytest.raises(ArchiveError):
        archive.assemble([chapter(1, "Intro")], "Course")
