"""
TaskStore - owner of the canonical task collection.

Every mutation builds the next version of the whole collection, writes it to
the tasks slot in one call, and only then swaps it in as the in-memory state.
A failed write therefore leaves the session exactly as it was.
"""
from typing import Any, Iterable, List, Mapping, Optional, Union

import pydantic

from .data.storage import StoragePort, TASKS_SLOT
from .data.validate import dump_collection, parse_collection
from .logs import get_logger
from .models import SubTask, Task, TaskDraft, TaskPatch, is_valid_task
from .recovery import NotFoundError, ValidationError
from .runtime import Clock, IdGenerator, UuidGenerator, system_clock

log = get_logger("store")

DraftLike = Union[TaskDraft, Mapping[str, Any]]
PatchLike = Union[TaskPatch, Mapping[str, Any]]


def _fields_from(error: pydantic.ValidationError) -> List[str]:
    fields = []
    for detail in error.errors():
        name = str(detail["loc"][0]) if detail.get("loc") else "__root__"
        if name not in fields:
            fields.append(name)
    return fields


def _coerce(model_type, value, what: str):
    if isinstance(value, model_type):
        return value
    try:
        return model_type.model_validate(value)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {what}: {e}", _fields_from(e)) from e


def _require_fields(candidate) -> None:
    result = is_valid_task(candidate)
    if not result:
        raise ValidationError(f"Missing required fields: {', '.join(result.missing)}", result.missing)


class TaskStore:
    """Create, update, delete and toggle tasks and their subtasks."""

    def __init__(self, storage: StoragePort, clock: Clock = system_clock, ids: Optional[IdGenerator] = None):
        self.storage = storage
        self.clock = clock
        self.ids = ids or UuidGenerator()
        self._tasks: List[Task] = []

    # --- reads ---

    def load(self) -> List[Task]:
        """Read the collection from storage, replacing whatever is in memory."""
        text = self.storage.get(TASKS_SLOT)
        self._tasks = parse_collection(text) if text is not None else []
        log.info(f"Loaded {len(self._tasks)} task(s)")
        return self.tasks

    @property
    def tasks(self) -> List[Task]:
        """Copy of the collection, most recent first."""
        return [task.model_copy(deep=True) for task in self._tasks]

    def get_task(self, task_id: str) -> Optional[Task]:
        task = next((t for t in self._tasks if t.id == task_id), None)
        return task.model_copy(deep=True) if task else None

    # --- task mutations ---

    def create_task(self, draft: DraftLike) -> Task:
        draft = _coerce(TaskDraft, draft, "task draft")
        _require_fields(draft)

        task_id = self._fresh_task_id()
        sub_tasks: List[SubTask] = []
        for entry in draft.sub_tasks:
            title = entry.title.strip()
            if not title:
                continue
            sub_tasks.append(SubTask(id=self._fresh_subtask_id(sub_tasks), title=title, completed=entry.completed))

        task = Task(
            id=task_id,
            title=draft.title.strip(),
            description=draft.description,
            subject=draft.subject.strip(),
            priority=draft.priority,
            due_date=draft.due_date,
            completed=False,
            created_at=self.clock(),
            sub_tasks=sub_tasks,
        )
        self._commit([task] + self._tasks)
        log.info(f"Created task {task.id} ({task.subject}: {task.title})")
        return task.model_copy(deep=True)

    def update_task(self, task_id: str, patch: PatchLike) -> Task:
        index = self._index_of(task_id)
        patch = _coerce(TaskPatch, patch, "task patch")
        current = self._tasks[index]

        changes = patch.model_dump(exclude_unset=True)
        for key in ("priority", "completed", "sub_tasks"):
            if key in changes and changes[key] is None:
                del changes[key]
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""
        for key in ("title", "subject"):
            if isinstance(changes.get(key), str):
                changes[key] = changes[key].strip()
        if "sub_tasks" in changes:
            changes["sub_tasks"] = self._rebuild_subtasks(changes["sub_tasks"])

        merged = current.model_dump()
        merged.update(changes)
        # immutable once assigned
        merged["id"] = current.id
        merged["created_at"] = current.created_at
        _require_fields(merged)

        try:
            updated = Task.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid task patch: {e}", _fields_from(e)) from e

        self._commit(self._replaced(index, updated))
        log.info(f"Updated task {task_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return updated.model_copy(deep=True)

    def delete_task(self, task_id: str) -> None:
        """Remove a task. Deleting an unknown id succeeds without writing."""
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            log.debug(f"Delete of unknown task {task_id} ignored")
            return
        self._commit(remaining)
        log.info(f"Deleted task {task_id}")

    def toggle_task(self, task_id: str) -> Task:
        """Flip the completed flag. No other task state changes."""
        index = self._index_of(task_id)
        current = self._tasks[index]
        updated = current.model_copy(update={"completed": not current.completed})
        self._commit(self._replaced(index, updated))
        log.info(f"Task {task_id} completed={updated.completed}")
        return updated.model_copy(deep=True)

    # --- subtask mutations ---

    def add_subtask(self, task_id: str, title: str) -> SubTask:
        index = self._index_of(task_id)
        title = (title or "").strip()
        if not title:
            raise ValidationError("Subtask title must not be blank", ["title"])

        current = self._tasks[index]
        subtask = SubTask(id=self._fresh_subtask_id(current.sub_tasks), title=title)
        updated = current.model_copy(update={"sub_tasks": current.sub_tasks + [subtask]})
        self._commit(self._replaced(index, updated))
        log.info(f"Added subtask {subtask.id} to task {task_id}")
        return subtask.model_copy()

    def toggle_subtask(self, task_id: str, subtask_id: str) -> None:
        index, current = self._resolve_subtask(task_id, subtask_id)
        sub_tasks = [
            st.model_copy(update={"completed": not st.completed}) if st.id == subtask_id else st
            for st in current.sub_tasks
        ]
        self._commit(self._replaced(index, current.model_copy(update={"sub_tasks": sub_tasks})))
        log.info(f"Toggled subtask {subtask_id} of task {task_id}")

    def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        index, current = self._resolve_subtask(task_id, subtask_id)
        sub_tasks = [st for st in current.sub_tasks if st.id != subtask_id]
        self._commit(self._replaced(index, current.model_copy(update={"sub_tasks": sub_tasks})))
        log.info(f"Deleted subtask {subtask_id} of task {task_id}")

    def clear(self) -> None:
        """Drop every task and the stored collection."""
        self.storage.clear(TASKS_SLOT)
        self._tasks = []
        log.warning("Task collection cleared")

    # --- internals ---

    def _commit(self, tasks: List[Task]) -> None:
        # PersistenceError propagates before the in-memory swap
        self.storage.set(TASKS_SLOT, dump_collection(tasks))
        self._tasks = tasks

    def _replaced(self, index: int, task: Task) -> List[Task]:
        tasks = list(self._tasks)
        tasks[index] = task
        return tasks

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(f"Task not found: {task_id}", task_id)

    def _resolve_subtask(self, task_id: str, subtask_id: str):
        index = self._index_of(task_id)
        task = self._tasks[index]
        if task.find_subtask(subtask_id) is None:
            raise NotFoundError(f"Subtask {subtask_id} not found in task {task_id}", subtask_id)
        return index, task

    def _fresh_task_id(self) -> str:
        taken = {t.id for t in self._tasks}
        return self._fresh_id(taken)

    def _fresh_subtask_id(self, siblings: Iterable[SubTask]) -> str:
        return self._fresh_id({st.id for st in siblings})

    def _fresh_id(self, taken) -> str:
        new_id = self.ids.new_id()
        while new_id in taken:
            new_id = self.ids.new_id()
        return new_id

    def _rebuild_subtasks(self, entries: List[dict]) -> List[SubTask]:
        sub_tasks: List[SubTask] = []
        for entry in entries:
            title = entry["title"].strip()
            if not title:
                raise ValidationError("Subtask title must not be blank", ["subTasks"])
            subtask_id = entry.get("id")
            if not subtask_id or any(st.id == subtask_id for st in sub_tasks):
                subtask_id = self._fresh_subtask_id(sub_tasks)
            sub_tasks.append(SubTask(id=subtask_id, title=title, completed=entry.get("completed", False)))
        return sub_tasks
