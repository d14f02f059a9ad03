from typing import Dict, Optional


class VidLuxeException(Exception):
    """Base exception for the VidLuxe media pipeline."""

    error_code = "VIDLUXE_ERROR"

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.error_code
        self.details = details or {}


class SpawnException(VidLuxeException):
    """Raised when an external binary cannot be started (missing, not executable)."""
    error_code = "SPAWN_ERROR"


class TimeoutException(VidLuxeException):
    """Raised when a subprocess or remote wait exceeds its time budget."""
    error_code = "TIMEOUT"


class TaskTimeoutException(TimeoutException):
    """Raised when polling an external task exceeds the client-side budget.

    The remote task is not cancelled and may keep running server-side.
    """
    error_code = "TASK_TIMEOUT"


class ProcessFailedException(VidLuxeException):
    """Raised when an external binary exits with a nonzero code."""
    error_code = "PROCESS_FAILED"

    def __init__(self, message: str, exit_code: int, stderr_tail: str = "", details: Dict = None):
        details = dict(details or {})
        details.update({"exit_code": exit_code, "stderr_tail": stderr_tail})
        super().__init__(message, details=details)
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail


class UnknownDurationException(VidLuxeException):
    """Raised when a video's duration cannot be determined."""
    error_code = "UNKNOWN_DURATION"


class NoFramesExtractedException(VidLuxeException):
    """Raised when sampling a video produced zero usable frames."""
    error_code = "NO_FRAMES"


class AnalysisFailedException(VidLuxeException):
    """Raised when color analysis has no usable frames to measure."""
    error_code = "ANALYSIS_FAILED"

    def __init__(self, reason: str, details: Dict = None):
        super().__init__(f"Color analysis failed: {reason}", details=details)
        self.reason = reason


class TaskFailedException(VidLuxeException):
    """Raised when the remote generation service reports a failed task."""
    error_code = "TASK_FAILED"


class ProviderException(VidLuxeException):
    """Raised when the remote generation service returns an error response."""
    error_code = "PROVIDER_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, details: Dict = None):
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.status_code = status_code


class ConfigurationException(VidLuxeException):
    """Raised when configuration is invalid."""
    error_code = "CONFIG_ERROR"


class ValidationException(VidLuxeException):
    """Raised when input validation fails."""
    error_code = "VALIDATION_ERROR"


class ResourceNotFoundException(VidLuxeException):
    """Raised when requested resource is not found."""
    error_code = "NOT_FOUND"
