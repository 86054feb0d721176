"""
StudyTracker - one user session over a task store and its stats state.

This is where the streak rule lives: completing a task through the tracker
bumps the streak, un-completing it never takes the streak back.
"""
from pathlib import Path
from typing import List, Optional, Set, Union

from .config import data_dir
from .data.storage import FileStorage, StoragePort
from .logs import get_logger
from .models import ALL_SUBJECTS, Stats, StatusFilter, SubTask, Task
from .query import distinct_subjects, filter_tasks
from .runtime import Clock, IdGenerator, system_clock
from .stats import StatsState, compute_stats
from .store import DraftLike, PatchLike, TaskStore

log = get_logger("tracker")


class StudyTracker:
    """Main entry point providing access to tasks and stats for one session."""

    def __init__(self, storage: StoragePort, clock: Clock = system_clock, ids: Optional[IdGenerator] = None):
        self.clock = clock
        self.store = TaskStore(storage, clock=clock, ids=ids)
        self.state = StatsState(storage)
        self.store.load()

    @classmethod
    def open(cls, directory: Union[Path, str, None] = None, **kwargs) -> "StudyTracker":
        """Start a file-backed session in ``directory`` (default: the configured data dir)."""
        directory = Path(directory) if directory else data_dir()
        log.debug(f"Opening tracker at {directory}")
        return cls(FileStorage(directory), **kwargs)

    @property
    def tasks(self) -> List[Task]:
        return self.store.tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.store.get_task(task_id)

    def create_task(self, draft: DraftLike) -> Task:
        return self.store.create_task(draft)

    def update_task(self, task_id: str, patch: PatchLike) -> Task:
        return self.store.update_task(task_id, patch)

    def delete_task(self, task_id: str) -> None:
        self.store.delete_task(task_id)

    def toggle_task(self, task_id: str) -> Task:
        """Flip a task; an incomplete→complete flip adds one to the streak."""
        task = self.store.toggle_task(task_id)
        if task.completed:
            streak = self.state.increment_streak()
            log.info(f"Streak is now {streak}")
        return task

    def add_subtask(self, task_id: str, title: str) -> SubTask:
        return self.store.add_subtask(task_id, title)

    def toggle_subtask(self, task_id: str, subtask_id: str) -> None:
        self.store.toggle_subtask(task_id, subtask_id)

    def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        self.store.delete_subtask(task_id, subtask_id)

    def filtered(self, status: Union[StatusFilter, str] = StatusFilter.ALL, subject: str = ALL_SUBJECTS) -> List[Task]:
        return filter_tasks(self.store.tasks, status, subject)

    def subjects(self) -> Set[str]:
        return distinct_subjects(self.store.tasks)

    def stats(self) -> Stats:
        return compute_stats(self.store.tasks, self.state.streak(), self.state.monthly_goal(), self.clock())

    def set_monthly_goal(self, goal: int) -> int:
        return self.state.set_monthly_goal(goal)
