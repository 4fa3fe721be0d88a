"""Error types raised by the progress engine."""

from __future__ import annotations

from typing import Any, Optional


class ProgressEngineError(Exception):
    """Base class for engine errors."""


class NotFoundError(ProgressEngineError, LookupError):
    """A timeline or task is absent from the snapshot."""


class MalformedDateError(ProgressEngineError, ValueError):
    """A date input could not be canonicalized."""

    def __init__(self, value: Any, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"malformed date {value!r}")


class ValidationFailedError(ProgressEngineError, ValueError):
    """Input rejected by validation, carrying the offending field and task."""

    def __init__(self, field: str, message: str, task_id: Optional[str] = None):
        self.field = field
        self.task_id = task_id
        prefix = f"Task {task_id}: " if task_id is not None else ""
        super().__init__(f"{prefix}{message}")
