"""
studytrack - a personal academic task tracker.

Tasks carry a subject, priority, due date and an ordered checklist of
subtasks. Completing tasks feeds a streak counter and a monthly goal.
"""

from .version import VERSION
from .models import (
    Priority,
    StatusFilter,
    SubTask,
    Task,
    TaskDraft,
    TaskPatch,
    Stats,
    is_valid_task,
)
from .query import filter_tasks, distinct_subjects
from .stats import compute_stats
from .store import TaskStore
from .tracker import StudyTracker

__version__ = VERSION

__all__ = [
    "VERSION",
    "Priority",
    "StatusFilter",
    "SubTask",
    "Task",
    "TaskDraft",
    "TaskPatch",
    "Stats",
    "is_valid_task",
    "filter_tasks",
    "distinct_subjects",
    "compute_stats",
    "TaskStore",
    "StudyTracker",
]
