import json
from functools import lru_cache
from typing import Any, List

import pydantic
from jsonschema import validate, ValidationError, SchemaError

from studytrack.logs import get_logger
from studytrack.models import Task, TaskList
from studytrack.recovery import CorruptionError, FatalError

# Configure log for clear output
log = get_logger("data.validate")

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

@lru_cache(maxsize=1)
def generate_schema() -> dict:
    """Generate the JSON schema of the stored task collection from the pydantic models."""
    schema = TaskList.model_json_schema(by_alias=True)
    schema["$schema"] = SCHEMA_DIALECT
    return schema

def validate_collection(data: Any, source: str = "stored tasks") -> None:
    """
    Validate decoded JSON against the task collection schema.

    Raises:
        CorruptionError: If the data does not match the schema.
        FatalError: If the schema itself is broken.
    """
    try:
        validate(instance=data, schema=generate_schema())
    except ValidationError as e:
        log.critical(f"{source} FAILED schema validation: {e.message}")
        raise CorruptionError(f"{source} failed schema validation: {e.message}") from e
    except SchemaError as e:
        log.critical(f"The task schema itself is invalid. Error: {e.message}")
        raise FatalError(f"Invalid task schema: {e.message}") from e
    log.debug(f"{source} is VALID")

def parse_collection(text: str, source: str = "stored tasks") -> List[Task]:
    """
    Decode, validate and parse a stored task collection.

    Args:
        text: The JSON array text from the tasks slot.
        source: Name used in log and error messages.

    Returns:
        The tasks, in stored order.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        # syntax errors mean the slot is corrupted
        log.critical(f"JSON syntax error in {source}: {e}")
        raise CorruptionError(f"JSON syntax error in {source}: {e}") from e

    validate_collection(data, source)

    try:
        return TaskList.model_validate(data).root
    except pydantic.ValidationError as e:
        log.critical(f"{source} could not be parsed: {e}")
        raise CorruptionError(f"{source} could not be parsed: {e}") from e

def dump_collection(tasks: List[Task]) -> str:
    """Serialize tasks to the JSON array stored in the tasks slot."""
    return TaskList(tasks).model_dump_json(by_alias=True)
