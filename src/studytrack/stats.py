"""
Stats aggregation and the two persisted scalars behind it (streak and monthly goal).
"""
from datetime import datetime
from typing import Iterable

from .config import DEFAULT_MONTHLY_GOAL
from .data.storage import StoragePort, STREAK_SLOT, GOAL_SLOT
from .logs import get_logger
from .models import Stats, Task
from .recovery import CorruptionError, ValidationError

log = get_logger("stats")


def _same_month(moment: datetime, now: datetime) -> bool:
    # compare in the caller's timezone when both sides carry one
    if moment.tzinfo is not None and now.tzinfo is not None:
        moment = moment.astimezone(now.tzinfo)
    return moment.year == now.year and moment.month == now.month


def compute_stats(tasks: Iterable[Task], persisted_streak: int, persisted_goal: int, now: datetime) -> Stats:
    """
    Derive dashboard numbers from the collection.

    ``thisMonthCompleted`` counts completed tasks *created* in the month of
    ``now``; tasks carry no completion timestamp.
    """
    total = pending = completed = this_month = 0
    for task in tasks:
        total += 1
        if task.completed:
            completed += 1
            if _same_month(task.created_at, now):
                this_month += 1
        else:
            pending += 1

    return Stats(
        total_tasks=total,
        pending_tasks=pending,
        completed_tasks=completed,
        current_streak=persisted_streak,
        monthly_goal=persisted_goal,
        this_month_completed=this_month,
    )


class StatsState:
    """Reads and writes the streak and monthly-goal slots."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def _read_int(self, slot: str, default: int, minimum: int) -> int:
        try:
            raw = self.storage.get(slot)
        except CorruptionError as e:
            log.warning(f"Ignoring unreadable {slot} slot ({e}); using {default}")
            return default
        if raw is None:
            return default
        try:
            value = int(raw.strip())
        except ValueError:
            log.warning(f"Ignoring unreadable {slot} value {raw!r}; using {default}")
            return default
        if value < minimum:
            log.warning(f"Ignoring out of range {slot} value {value}; using {default}")
            return default
        return value

    def streak(self) -> int:
        return self._read_int(STREAK_SLOT, 0, 0)

    def monthly_goal(self) -> int:
        return self._read_int(GOAL_SLOT, DEFAULT_MONTHLY_GOAL, 1)

    def set_streak(self, value: int) -> int:
        if value < 0:
            raise ValidationError("Streak cannot be negative", ["currentStreak"])
        self.storage.set(STREAK_SLOT, str(value))
        log.debug(f"Streak set to {value}")
        return value

    def increment_streak(self) -> int:
        """Add one completion to the streak and persist it."""
        return self.set_streak(self.streak() + 1)

    def set_monthly_goal(self, value: int) -> int:
        if value <= 0:
            raise ValidationError("Monthly goal must be greater than zero", ["monthlyGoal"])
        self.storage.set(GOAL_SLOT, str(value))
        log.info(f"Monthly goal set to {value}")
        return value
