"""Exception hierarchy shared by every Heurist client resource."""

from __future__ import annotations

from typing import Optional


class HeuristError(RuntimeError):
    """Base class for all errors raised by the SDK."""


class ConfigurationError(HeuristError, ValueError):
    """Raised synchronously for bad client setup, before any network call."""


class APIError(HeuristError):
    """Raised when a remote endpoint rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.endpoint = endpoint

    @property
    def details(self) -> dict:
        return {
            "status_code": self.status_code,
            "error_type": self.error_type,
            "message": self.message,
        }


class WorkflowTimeoutError(HeuristError, TimeoutError):
    """The polling deadline passed before the task reached a terminal status.

    The remote task is left untouched and may still be running.
    """

    def __init__(self, task_id: str, timeout_ms: int) -> None:
        super().__init__(f"Timeout waiting for task result ({task_id} after {timeout_ms} ms)")
        self.task_id = task_id
        self.timeout_ms = timeout_ms


class PollingStoppedError(HeuristError):
    """The caller's stop event was set while waiting for a task."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Stopped waiting for task {task_id}")
        self.task_id = task_id


__all__ = [
    "HeuristError",
    "ConfigurationError",
    "APIError",
    "WorkflowTimeoutError",
    "PollingStoppedError",
]
