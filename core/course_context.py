# core/course_context.py
import json
import logging
from typing import Optional
from bs4 import BeautifulSoup
from core.entities import ContextExtractor, CourseContext
from util.errors import ContextError

logger = logging.getLogger(__name__)

COURSE_MODULE_SELECTOR = '[data-module-id="course-taking"]'
NOT_A_COURSE_PAGE = "Could not find Course ID. Ensure you are on the Course Learning Page."


def _course_id_from_args(raw_args: Optional[str]) -> int:
    if not raw_args:
        raise ContextError("Course args not found")
    try:
        args = json.loads(raw_args)
    except json.JSONDecodeError as e:
        raise ContextError(f"Course args are not valid JSON: {e.msg}") from e

    course_id = args.get("courseId") if isinstance(args, dict) else None
    if course_id is None:
        raise ContextError("Course ID not found in module args")
    # bool is an int subclass; reject it explicitly
    if not isinstance(course_id, int) or isinstance(course_id, bool):
        raise ContextError(f"Course ID must be a number, got {type(course_id).__name__}")
    return course_id


def _course_title(soup: BeautifulSoup) -> str:
    node = soup.find("title")
    title = node.get_text() if node else ""
    # "<course> | <site>"
    return title.split("|")[0].strip()


def extract_course_context(page_html: str) -> CourseContext:
    """
    Read the course identity from a course-taking page.

    The page carries a `data-module-id="course-taking"` element whose
    `data-module-args` attribute is a JSON object with a numeric `courseId`;
    the document title holds the course name before the first "|".
    Raises ContextError when the markup does not belong to a course session.
    """
    soup = BeautifulSoup(page_html or "", "html.parser")
    el = soup.select_one(COURSE_MODULE_SELECTOR)
    try:
        if el is None:
            raise ContextError("Course element not found")
        course_id = _course_id_from_args(el.get("data-module-args"))
    except ContextError as e:
        logger.warning("context.invalid reason=%s", e)
        raise ContextError(NOT_A_COURSE_PAGE) from e

    title = _course_title(soup) or f"Course {course_id}"
    logger.info("context.ok course=%d", course_id)
    return CourseContext(course_id=course_id, course_title=title)


def page_context_extractor(page_html: str) -> ContextExtractor:
    return lambda: extract_course_context(page_html)


def fixed_context_extractor(course_id: int, course_title: Optional[str]) -> ContextExtractor:
    """For callers that already know the course identity."""
    context = CourseContext(
        course_id=course_id, course_title=(course_title or "").strip() or f"Course {course_id}"
    )
    return lambda: context
