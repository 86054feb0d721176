"""Unit tests for TaskStore."""

import json
from datetime import date
from unittest.mock import patch

import pytest

from studytrack.data.storage import MemoryStorage, TASKS_SLOT
from studytrack.models import Priority, SubTask
from studytrack.recovery import NotFoundError, PersistenceError, ValidationError
from studytrack.runtime import IdGenerator, fixed_clock
from studytrack.store import TaskStore


class RepeatingIds(IdGenerator):
    def __init__(self, values):
        self.values = iter(values)

    def new_id(self):
        return next(self.values)


def stored_ids(storage):
    return [t["id"] for t in json.loads(storage.get(TASKS_SLOT))]


class TestCreateTask:
    """Test task creation."""

    def test_assigns_defaults(self, store, math_draft, now):
        task = store.create_task(math_draft)
        assert task.id == "id-1"
        assert task.completed is False
        assert task.created_at == now
        assert task.sub_tasks == []
        assert task.priority == Priority.HIGH
        assert task.due_date == date(2025, 1, 10)

    def test_priority_and_description_default(self, store, physics_draft):
        task = store.create_task(physics_draft)
        assert task.priority == Priority.MEDIUM
        assert task.description == ""

    def test_fresh_id_differs_from_existing(self, storage, math_draft):
        store = TaskStore(storage, ids=RepeatingIds(["a", "a", "a", "b"]))
        first = store.create_task(math_draft)
        second = store.create_task(math_draft)
        assert first.id == "a"
        assert second.id == "b"

    def test_most_recent_first(self, store, math_draft, physics_draft, storage):
        a = store.create_task(math_draft)
        b = store.create_task(physics_draft)
        assert [t.id for t in store.tasks] == [b.id, a.id]
        assert stored_ids(storage) == [b.id, a.id]

    def test_draft_subtasks_get_ids(self, store, math_draft):
        math_draft["subTasks"] = [{"title": "Read ch.1"}, {"title": "  "}, {"title": "Read ch.2", "completed": True}]
        task = store.create_task(math_draft)
        assert [st.title for st in task.sub_tasks] == ["Read ch.1", "Read ch.2"]
        assert len({st.id for st in task.sub_tasks}) == 2
        assert task.sub_tasks[1].completed is True

    @pytest.mark.parametrize("field", ["title", "subject", "dueDate"])
    def test_missing_required_field(self, store, storage, math_draft, field):
        math_draft[field] = ""
        with pytest.raises(ValidationError) as exc:
            store.create_task(math_draft)
        assert exc.value.fields == [field]
        assert store.tasks == []
        assert storage.get(TASKS_SLOT) is None

    def test_invalid_priority_is_a_validation_error(self, store, math_draft):
        math_draft["priority"] = "urgent"
        with pytest.raises(ValidationError):
            store.create_task(math_draft)

    def test_strips_title_and_subject(self, store, math_draft):
        math_draft["title"] = "  Problem set 3 "
        math_draft["subject"] = " Math"
        task = store.create_task(math_draft)
        assert task.title == "Problem set 3"
        assert task.subject == "Math"


class TestUpdateTask:
    """Test merging patches into tasks."""

    def test_merges_fields(self, store, math_draft):
        task = store.create_task(math_draft)
        updated = store.update_task(task.id, {"title": "Problem set 4", "priority": "low"})
        assert updated.title == "Problem set 4"
        assert updated.priority == Priority.LOW
        assert updated.subject == "Math"
        assert store.get_task(task.id) == updated

    def test_id_and_created_at_are_ignored(self, store, math_draft, now):
        task = store.create_task(math_draft)
        updated = store.update_task(task.id, {"id": "hijack", "createdAt": "2020-01-01T00:00:00Z", "subject": "Algebra"})
        assert updated.id == task.id
        assert updated.created_at == now
        assert updated.subject == "Algebra"

    def test_unknown_id(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.update_task("nope", {"title": "x"})
        assert exc.value.missing_id == "nope"

    def test_blanking_required_field_is_rejected(self, store, storage, math_draft):
        task = store.create_task(math_draft)
        before = storage.get(TASKS_SLOT)
        with pytest.raises(ValidationError) as exc:
            store.update_task(task.id, {"subject": "  "})
        assert exc.value.fields == ["subject"]
        assert store.get_task(task.id).subject == "Math"
        assert storage.get(TASKS_SLOT) == before

    def test_replacing_subtasks_keeps_known_ids(self, store, math_draft):
        task = store.create_task(math_draft)
        sub = store.add_subtask(task.id, "Read ch.1")
        updated = store.update_task(task.id, {"subTasks": [
            {"id": sub.id, "title": "Read chapter 1", "completed": True},
            {"title": "Do exercises"},
        ]})
        assert updated.sub_tasks[0].id == sub.id
        assert updated.sub_tasks[0].title == "Read chapter 1"
        assert updated.sub_tasks[1].id not in (None, "", sub.id)

    def test_update_does_not_touch_completion(self, store, math_draft):
        task = store.create_task(math_draft)
        store.toggle_task(task.id)
        assert store.update_task(task.id, {"description": None}).completed is True


class TestDeleteTask:
    def test_removes_task(self, store, math_draft, physics_draft, storage):
        a = store.create_task(math_draft)
        b = store.create_task(physics_draft)
        store.delete_task(a.id)
        assert [t.id for t in store.tasks] == [b.id]
        assert stored_ids(storage) == [b.id]

    def test_unknown_id_is_silent(self, store, math_draft):
        store.create_task(math_draft)
        with patch.object(store.storage, "set") as mock_set:
            store.delete_task("nope")
        mock_set.assert_not_called()
        assert len(store.tasks) == 1

    def test_update_after_delete_fails(self, store, math_draft):
        task = store.create_task(math_draft)
        store.delete_task(task.id)
        with pytest.raises(NotFoundError):
            store.update_task(task.id, {"title": "again"})


class TestToggleTask:
    def test_toggle_twice_restores(self, store, math_draft):
        task = store.create_task(math_draft)
        assert store.toggle_task(task.id).completed is True
        assert store.toggle_task(task.id).completed is False

    def test_only_flips_completed(self, store, math_draft):
        task = store.create_task(math_draft)
        toggled = store.toggle_task(task.id)
        assert toggled.model_dump(exclude={"completed"}) == task.model_dump(exclude={"completed"})

    def test_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.toggle_task("nope")


class TestSubTasks:
    """Test subtask operations."""

    def test_add_and_toggle_leaves_parent_pending(self, store, math_draft):
        task = store.create_task(math_draft)
        sub = store.add_subtask(task.id, "Read ch.1")
        store.toggle_subtask(task.id, sub.id)
        reloaded = store.get_task(task.id)
        assert reloaded.find_subtask(sub.id).completed is True
        assert reloaded.completed is False

    def test_appends_in_order(self, store, math_draft):
        task = store.create_task(math_draft)
        for title in ("one", "two", "three"):
            store.add_subtask(task.id, title)
        assert [st.title for st in store.get_task(task.id).sub_tasks] == ["one", "two", "three"]

    def test_subtask_ids_unique_within_task(self, store, math_draft):
        task = store.create_task(math_draft)
        subs = [store.add_subtask(task.id, f"step {n}") for n in range(5)]
        assert len({st.id for st in subs}) == 5

    def test_blank_title_rejected(self, store, math_draft):
        task = store.create_task(math_draft)
        with pytest.raises(ValidationError):
            store.add_subtask(task.id, "   ")
        assert store.get_task(task.id).sub_tasks == []

    def test_add_to_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            store.add_subtask("nope", "Read")

    def test_delete_subtask_keeps_parent_state(self, store, math_draft):
        task = store.create_task(math_draft)
        store.toggle_task(task.id)
        keep = store.add_subtask(task.id, "keep")
        drop = store.add_subtask(task.id, "drop")
        store.delete_subtask(task.id, drop.id)
        reloaded = store.get_task(task.id)
        assert [st.id for st in reloaded.sub_tasks] == [keep.id]
        assert reloaded.completed is True

    @pytest.mark.parametrize("operation", ["toggle_subtask", "delete_subtask"])
    def test_unknown_ids(self, store, math_draft, operation):
        task = store.create_task(math_draft)
        sub = store.add_subtask(task.id, "Read")
        with pytest.raises(NotFoundError):
            getattr(store, operation)("nope", sub.id)
        with pytest.raises(NotFoundError) as exc:
            getattr(store, operation)(task.id, "nope")
        assert exc.value.missing_id == "nope"


class TestPersistence:
    """Test how mutations reach the storage port."""

    def test_every_mutation_writes_whole_collection(self, store, math_draft, physics_draft, storage):
        a = store.create_task(math_draft)
        b = store.create_task(physics_draft)
        store.toggle_task(a.id)
        stored = json.loads(storage.get(TASKS_SLOT))
        assert [t["id"] for t in stored] == [b.id, a.id]
        assert stored[1]["completed"] is True

    def test_failed_write_leaves_memory_unchanged(self, store, math_draft):
        task = store.create_task(math_draft)
        with patch.object(store.storage, "set", side_effect=PersistenceError("disk full")):
            with pytest.raises(PersistenceError):
                store.toggle_task(task.id)
            with pytest.raises(PersistenceError):
                store.create_task(math_draft)
            with pytest.raises(PersistenceError):
                store.add_subtask(task.id, "Read")
        assert len(store.tasks) == 1
        assert store.get_task(task.id).completed is False
        assert store.get_task(task.id).sub_tasks == []

    def test_load_reads_previous_session(self, storage, math_draft, now):
        first = TaskStore(storage, clock=fixed_clock(now))
        task = first.create_task(math_draft)
        second = TaskStore(storage)
        assert second.tasks == []
        assert [t.to_dict() for t in second.load()] == [task.to_dict()]

    def test_load_empty_storage(self):
        assert TaskStore(MemoryStorage()).load() == []

    def test_returned_tasks_are_copies(self, store, math_draft):
        task = store.create_task(math_draft)
        task.sub_tasks.append(SubTask(id="x", title="sneaky"))
        assert store.get_task(task.id).sub_tasks == []

    def test_clear(self, store, storage, math_draft):
        store.create_task(math_draft)
        store.clear()
        assert store.tasks == []
        assert storage.get(TASKS_SLOT) is None
