import tempfile, yaml, json, os
from typing import Union, Any, Optional
from pathlib import Path
from studytrack.recovery import PersistenceError, FatalError, CorruptionError
from studytrack.logs import get_logger

log = get_logger("data.io")

DATA_YAML = 0
DATA_JSON = 1

def _cleanup(temp_path: Optional[str]):
    if temp_path is not None and os.path.exists(temp_path):
        try:
            os.unlink(temp_path)
            log.debug(f"Cleaned up temporary file: {temp_path}")
        except OSError as cleanup_error:
            log.warning(f"Could not clean up temp file {temp_path}: {cleanup_error}")

def _create_dirs(file_path: Path):
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        error_msg = f"Cannot create directory {file_path.parent}: {e}"
        log.error(error_msg)
        raise PersistenceError(error_msg) from e

def serialize(data_type: int, data: Any) -> str:
    """Render ``data`` as YAML or JSON text."""
    try:
        if data_type == DATA_YAML:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
        elif data_type == DATA_JSON:
            return json.dumps(data, indent=2, ensure_ascii=False)
    except (yaml.YAMLError, TypeError, ValueError) as e:
        # FATAL ERROR: Data cannot be serialized
        error_msg = f"Data serialization failed; in-memory data may contain non-serializable types: {e}"
        log.critical(error_msg)
        raise FatalError(error_msg) from e
    raise FatalError("Unsupported Data Format")

def atomic_write_text(file_path: Union[Path, str], text: str, create_dirs: bool = True):
    """
    Replace the contents of ``file_path`` with ``text`` using atomic updates.

    The text goes to a temporary file in the same directory which is fsynced and
    then moved over the target, so readers see either the old or the new file.
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        if create_dirs:
            _create_dirs(file_path)

        # Create temporary file in the same directory as target for atomicity
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=file_path.parent, prefix=f".{file_path.name}.", suffix='.tmp', delete=False) as temp_file:
            temp_path = temp_file.name
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        # Atomic replace - this either completely succeeds or completely fails
        os.replace(temp_path, file_path)
        log.debug(f"Successfully saved file: {file_path}")

    except (IOError, OSError) as e:
        _cleanup(temp_path)
        # RECOVERABLE ERROR: I/O issues
        error_msg = f"I/O error saving file {file_path}: {e}"
        log.error(error_msg)
        raise PersistenceError(error_msg) from e

def atomic_write(data_type: int, file_path: Union[Path, str], data: Any, create_dirs: bool = True):
    """Serialize and save data to a YAML or JSON file using atomic updates."""
    atomic_write_text(file_path, serialize(data_type, data), create_dirs=create_dirs)

def read_text(file_path: Union[Path, str]) -> Optional[str]:
    """
    Read a text file.

    Args:
        file_path: Path to the file

    Returns:
        The file contents, or None if the file doesn't exist

    Raises:
        CorruptionError: the file is not valid UTF-8 text
        PersistenceError: the file exists but cannot be read
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None

    try:
        return file_path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        error_msg = f"File {file_path} is not valid UTF-8: {e}"
        log.critical(error_msg)
        raise CorruptionError(error_msg) from e
    except (IOError, OSError) as e:
        # I/O errors are recoverable
        raise PersistenceError(f"Failed to read file {file_path}: {e}") from e
