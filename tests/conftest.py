"""Test configuration: required settings and shared fixtures."""

from __future__ import annotations

import os

# Settings are read at import time; provide the required values first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost")
os.environ.setdefault("THROTTLE_MIN_SECONDS", "0")
os.environ.setdefault("THROTTLE_MAX_SECONDS", "0")

import pytest  # noqa: E402

from fakes import (  # noqa: E402
    FakeCourseSource,
    InMemoryRunStateStore,
    InMemorySink,
    chapter,
    lecture,
    vtt,
)
from model.curriculum import WorkItem  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> InMemoryRunStateStore:
    return InMemoryRunStateStore()


@pytest.fixture
def sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def example_curriculum() -> list[WorkItem]:
    return [
        chapter(1, "Intro", 1),
        lecture(11, "Welcome", 2),
        chapter(2, "Basics", 3),
        lecture(21, "Vars", 4),
    ]


@pytest.fixture
def example_source(example_curriculum: list[WorkItem]) -> FakeCourseSource:
    return FakeCourseSource(
        example_curriculum,
        transcripts={11: vtt("Welcome text"), 21: vtt("Vars text")},
    )
