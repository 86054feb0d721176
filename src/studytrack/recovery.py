class StudyTrackError(Exception):
    """Base exception for all studytrack errors."""
    pass

class RecoverableError(StudyTrackError):
    """An error that can be recovered from without data loss."""
    pass

class FatalError(StudyTrackError):
    """An error that requires application termination or major intervention."""
    pass

class CorruptionError(FatalError):
    """Corrupted Data Error - from syntax errors in stored JSON, to data that fails the schema"""
    pass

class ValidationError(RecoverableError):
    """A draft or patch is missing required fields or carries invalid values."""

    def __init__(self, message: str, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])

class NotFoundError(RecoverableError):
    """An operation referenced a task or subtask id that does not exist."""

    def __init__(self, message: str, missing_id: str = None):
        super().__init__(message)
        self.missing_id = missing_id

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class PersistenceError(FileOperationError):
    """ The durable store could not be read or written """
    pass
