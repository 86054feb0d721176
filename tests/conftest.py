"""Shared fixtures."""

import os
import tempfile

# keep log files out of the real home directory; must run before studytrack is imported
os.environ.setdefault("STUDYTRACK_HOME", tempfile.mkdtemp(prefix="studytrack-test-"))

from datetime import date, datetime, timezone

import pytest

from studytrack.data.storage import MemoryStorage
from studytrack.runtime import SequentialIdGenerator, fixed_clock
from studytrack.store import TaskStore
from studytrack.tracker import StudyTracker

NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def ids():
    return SequentialIdGenerator()


@pytest.fixture
def store(storage, ids):
    return TaskStore(storage, clock=fixed_clock(NOW), ids=ids)


@pytest.fixture
def tracker(storage, ids):
    return StudyTracker(storage, clock=fixed_clock(NOW), ids=ids)


@pytest.fixture
def math_draft():
    return {
        "title": "Problem set 3",
        "subject": "Math",
        "dueDate": "2025-01-10",
        "priority": "high",
        "description": "Exercises 1-12",
    }


@pytest.fixture
def physics_draft():
    return {
        "title": "Lab report",
        "subject": "Physics",
        "dueDate": date(2025, 1, 5),
    }
