from pydantic import BaseModel, ConfigDict, Field, RootModel, computed_field, field_validator
from pydantic.alias_generators import to_camel, to_snake
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional, List, Union
import json

from .config import DEFAULT_MONTHLY_GOAL

ALL_SUBJECTS = "all"

# JSON names of the fields a task cannot be saved without
REQUIRED_FIELDS = ("title", "subject", "dueDate")

class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class StatusFilter(Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"

class BaseJSONModel(BaseModel):
    """Base model whose JSON shape uses camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, text: str):
        return cls.model_validate(json.loads(text))

class SubTask(BaseJSONModel):
    id: str = Field(description="Identifier, unique within the owning task")
    title: str = Field(min_length=1, description="What needs doing")
    completed: bool = Field(default=False, description="Whether the sub-task is done")

class Task(BaseJSONModel):
    """A unit of academic work."""

    id: str = Field(description="Globally unique identifier, assigned once at creation")
    title: str = Field(min_length=1, description="Short title of the task")
    description: str = Field(default="", description="Optional longer description")
    subject: str = Field(min_length=1, description="The subject or course the task belongs to")
    priority: Priority = Field(default=Priority.MEDIUM, description="How important the task is")
    due_date: date = Field(description="When the task is due")
    completed: bool = Field(default=False, description="Whether the task is done")
    created_at: datetime = Field(description="When the task was created; never changes")
    sub_tasks: List[SubTask] = Field(
        default_factory=list,
        description="Ordered checklist of sub-tasks"
    )

    def find_subtask(self, subtask_id: str) -> Optional[SubTask]:
        """Find a subtask by id."""
        return next((st for st in self.sub_tasks if st.id == subtask_id), None)

class TaskList(RootModel[List[Task]]):
    """The full persisted task collection, most recent first."""

class SubTaskDraft(BaseJSONModel):
    title: str = ""
    completed: bool = False

class TaskDraft(BaseJSONModel):
    """User input for a new task. Nothing is enforced here; the store validates."""

    title: str = ""
    description: str = ""
    subject: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    sub_tasks: List[SubTaskDraft] = Field(default_factory=list)

    @field_validator('due_date', mode='before')
    @classmethod
    def blank_date_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('title', 'description', 'subject', mode='before')
    @classmethod
    def none_is_blank(cls, v):
        return "" if v is None else v

class SubTaskPatch(BaseJSONModel):
    id: Optional[str] = None
    title: str
    completed: bool = False

class TaskPatch(BaseJSONModel):
    """Fields to merge into an existing task. ``id`` and ``createdAt`` are not patchable."""

    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None
    sub_tasks: Optional[List[SubTaskPatch]] = None

    @field_validator('due_date', mode='before')
    @classmethod
    def blank_date_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class ValidationResult(BaseModel):
    """Outcome of checking a draft; truthy when nothing is missing."""

    missing: List[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.missing

    def __bool__(self) -> bool:
        return self.valid

def _field_value(draft: Any, name: str, alias: str) -> Any:
    if isinstance(draft, Mapping):
        return draft.get(alias, draft.get(name))
    return getattr(draft, name, None)

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False

def is_valid_task(draft: Union[TaskDraft, TaskPatch, Task, Mapping[str, Any]]) -> ValidationResult:
    """Report which of title, subject and dueDate are missing or blank."""
    missing = [
        alias for alias in REQUIRED_FIELDS
        if _is_blank(_field_value(draft, to_snake(alias), alias))
    ]
    return ValidationResult(missing=missing)

class Stats(BaseJSONModel):
    """Dashboard numbers derived from the collection plus the two persisted scalars."""

    total_tasks: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0
    current_streak: int = Field(default=0, ge=0)
    monthly_goal: int = Field(default=DEFAULT_MONTHLY_GOAL, gt=0)
    this_month_completed: int = 0

    @computed_field
    @property
    def goal_progress(self) -> int:
        """Percent of the monthly goal reached, capped at 100."""
        return min(100, (self.this_month_completed * 100) // self.monthly_goal)

    @computed_field
    @property
    def goal_reached(self) -> bool:
        return self.this_month_completed >= self.monthly_goal
