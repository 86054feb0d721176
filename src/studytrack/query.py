from __future__ import annotations

from datetime import date
from typing import Iterable, List, Set, Tuple, Union

from .models import ALL_SUBJECTS, StatusFilter, Task


def _status_matches(task: Task, status: StatusFilter) -> bool:
    if status is StatusFilter.PENDING:
        return not task.completed
    if status is StatusFilter.COMPLETED:
        return task.completed
    return True


def filter_tasks(
    tasks: Iterable[Task],
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
    subject_filter: str = ALL_SUBJECTS,
) -> List[Task]:
    """
    Tasks matching both the status and the subject filter, in input order.

    ``subject_filter`` is either "all" or a subject compared by exact match.
    Raises ValueError for an unknown status filter.
    """
    status = StatusFilter(status_filter)
    return [
        t for t in tasks
        if _status_matches(t, status)
        and (subject_filter == ALL_SUBJECTS or t.subject == subject_filter)
    ]


def distinct_subjects(tasks: Iterable[Task]) -> Set[str]:
    return {t.subject for t in tasks}


def is_overdue(task: Task, today: date) -> bool:
    """A pending task whose due date has passed."""
    return not task.completed and task.due_date < today


def subtask_progress(task: Task) -> Tuple[int, int]:
    """(completed, total) subtasks."""
    done = sum(1 for st in task.sub_tasks if st.completed)
    return done, len(task.sub_tasks)
