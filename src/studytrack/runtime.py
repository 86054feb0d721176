"""
Injectable capabilities: the "now" source and the id generator.

A clock is any zero-argument callable returning a ``datetime``. An id generator
is any object with a ``new_id()`` method returning a fresh string.
"""
import abc
import itertools
import uuid
from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current local time, timezone aware."""
    return datetime.now().astimezone()


def fixed_clock(moment: datetime) -> Clock:
    """A clock that always answers ``moment``."""
    return lambda: moment


class IdGenerator(abc.ABC):
    """Yields unique id strings."""

    @abc.abstractmethod
    def new_id(self) -> str:
        pass


class UuidGenerator(IdGenerator):
    def new_id(self) -> str:
        return uuid.uuid4().hex


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids: ``<prefix>1``, ``<prefix>2``, ..."""

    def __init__(self, prefix: str = "id-", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def new_id(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
