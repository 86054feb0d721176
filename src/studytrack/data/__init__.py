"""
Data management submodule: the persistence port and its adapters, atomic file
IO, and schema validation of stored collections.
"""

from .storage import StoragePort, MemoryStorage, FileStorage, TASKS_SLOT, STREAK_SLOT, GOAL_SLOT
from .validate import generate_schema, validate_collection, parse_collection, dump_collection

# Define what gets imported with `from data import *`
__all__ = [
    'StoragePort',
    'MemoryStorage',
    'FileStorage',
    'TASKS_SLOT',
    'STREAK_SLOT',
    'GOAL_SLOT',
    'generate_schema',
    'validate_collection',
    'parse_collection',
    'dump_collection',
]
