"""
Persistence port - named string slots in a durable key-value store.

The core never touches files directly; it is handed a ``StoragePort`` and reads
or writes whole slots through it. ``MemoryStorage`` backs tests and embedding,
``FileStorage`` keeps one file per slot in a data directory.
"""
import abc
import re
from pathlib import Path
from typing import Dict, Optional, Union

from .io import atomic_write_text, read_text
from studytrack.recovery import PersistenceError
from studytrack.logs import get_logger

log = get_logger("data.storage")

TASKS_SLOT = "studentTasks"
STREAK_SLOT = "currentStreak"
GOAL_SLOT = "monthlyGoal"

_SLOT_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

class StoragePort(abc.ABC):
    """Get, set and clear named string slots."""

    @abc.abstractmethod
    def get(self, slot: str) -> Optional[str]:
        """Return the stored value, or None when the slot was never written."""
        pass

    @abc.abstractmethod
    def set(self, slot: str, value: str) -> None:
        """Durably replace the slot's value. Raises PersistenceError on failure."""
        pass

    @abc.abstractmethod
    def clear(self, slot: str) -> None:
        """Remove the slot. Clearing an absent slot is not an error."""
        pass

class MemoryStorage(StoragePort):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.slots: Dict[str, str] = dict(initial or {})

    def get(self, slot: str) -> Optional[str]:
        return self.slots.get(slot)

    def set(self, slot: str, value: str) -> None:
        self.slots[slot] = value

    def clear(self, slot: str) -> None:
        self.slots.pop(slot, None)

class FileStorage(StoragePort):
    """Stores each slot as ``<data_dir>/<slot>.json``."""

    def __init__(self, data_dir: Union[Path, str]):
        self.data_dir = Path(data_dir)

    def path_for(self, slot: str) -> Path:
        if not _SLOT_PATTERN.match(slot):
            raise ValueError(f"Invalid slot name: {slot}")
        return self.data_dir / f"{slot}.json"

    def get(self, slot: str) -> Optional[str]:
        return read_text(self.path_for(slot))

    def set(self, slot: str, value: str) -> None:
        atomic_write_text(self.path_for(slot), value)

    def clear(self, slot: str) -> None:
        path = self.path_for(slot)
        try:
            path.unlink()
            log.info(f"Cleared slot {slot}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Failed to clear {path}: {e}") from e
