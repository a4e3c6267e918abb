from __future__ import annotations

import pytest

from util.functions import progress_percent, sanitize_file_name


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("A/B: Intro?!", "AB Intro"),
        ("?!/*", "untitled"),
        ("", "untitled"),
        ("  padded title  ", "padded title"),
        ("snake_case-and-dash", "snake_case-and-dash"),
        ("Café déjà vu", "Caf dj vu"),
        ("Part 1:\n\tSetup", "Part 1 Setup"),
        ("\r\nLine\tbreaks\n", "Line breaks"),
    ],
)
def test_sanitize_file_name(raw: str, expected: str) -> None:
    assert sanitize_file_name(raw) == expected


def test_sanitize_file_name_truncates_to_max_length() -> None:
    assert sanitize_file_name("x" * 250) == "x" * 100
    assert sanitize_file_name("abcdef", max_length=3) == "abc"


def test_progress_percent_rounds_and_handles_empty_total() -> None:
    assert progress_percent(0, 0) == 0
    assert progress_percent(1, 3) == 33
    assert progress_percent(2, 3) == 67
    assert progress_percent(4, 4) == 100
