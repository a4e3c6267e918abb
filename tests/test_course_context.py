from __future__ import annotations

import json

import pytest

from core.course_context import (
    NOT_A_COURSE_PAGE,
    extract_course_context,
    fixed_context_extractor,
    page_context_extractor,
)
from util.errors import ContextError


def _page(args: object, title: str = "Python Basics | Udemy") -> str:
    raw = args if isinstance(args, str) else json.dumps(args)
    return (
        f"<html><head><title>{title}</title></head><body>"
        f"<div data-module-id=\"course-taking\" data-module-args='{raw}'></div>"
        "</body></html>"
    )


def test_extracts_course_id_and_title() -> None:
    ctx = extract_course_context(_page({"courseId": 4242, "other": True}))

    assert ctx.course_id == 4242
    assert ctx.course_title == "Python Basics"


def test_falls_back_to_generic_title_when_page_has_none() -> None:
    ctx = extract_course_context(_page({"courseId": 7}, title=""))
    assert ctx.course_title == "Course 7"


@pytest.mark.parametrize(
    "html",
    [
        "<html><body><p>Not a course</p></body></html>",
        _page("{not json"),
        _page({"lectureId": 3}),
        _page({"courseId": "4242"}),
        _page({"courseId": True}),
        "",
    ],
)
def test_rejects_pages_without_a_course_session(html: str) -> None:
    with pytest.raises(ContextError) as exc:
        extract_course_context(html)
    assert str(exc.value) == NOT_A_COURSE_PAGE


def test_page_extractor_defers_parsing_until_called() -> None:
    extractor = page_context_extractor("<html></html>")
    with pytest.raises(ContextError):
        extractor()


def test_fixed_extractor_uses_given_identity() -> None:
    assert fixed_context_extractor(9, "  Rust 101 ")().course_title == "Rust 101"
    assert fixed_context_extractor(9, None)().course_title == "Course 9"
