"""Structured error types for MCP responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class ErrorResponse:
    """Serializable error payload returned by MCP handlers."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class McpError(RuntimeError):
    """Exception carrying a structured error response."""

    def __init__(
        self, code: str, message: str, details: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.error = ErrorResponse(
            code=code, message=message, details=dict(details or {})
        )


class TaskNotFound(McpError):
    """No heading in the workflow document carries the requested ID."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            "TASK_NOT_FOUND",
            f"Task not found for id={task_id}",
            {"id": task_id},
        )


class InvalidState(McpError):
    """Requested state keyword is outside the configured set."""

    def __init__(self, state: Any, allowed: Iterable[str]) -> None:
        allowed = list(allowed)
        super().__init__(
            "INVALID_STATE",
            f"Invalid state: {state}. Allowed: {', '.join(allowed)}",
            {"state": str(state), "allowed": allowed},
        )


class MalformedHeading(McpError):
    """Heading line cannot be split into markers and remainder."""

    def __init__(self, task_id: str, line: str) -> None:
        super().__init__(
            "MALFORMED_HEADING",
            f"Invalid org heading for task {task_id}: {line}",
            {"id": task_id, "line": line},
        )


class LockTimeout(McpError):
    """Advisory lock could not be acquired in time."""

    def __init__(self, lock_path: str, timeout: float) -> None:
        super().__init__(
            "LOCK_TIMEOUT",
            f"Timed out waiting for lock: {lock_path}",
            {"lock": lock_path, "timeout": timeout},
        )


class HomeDirectoryUnresolved(McpError):
    """A ``~/`` path was requested but no home directory is available."""

    def __init__(self, raw_path: str) -> None:
        super().__init__(
            "HOME_UNRESOLVED",
            "Unable to resolve home directory.",
            {"path": raw_path},
        )


class WorkflowIOError(McpError):
    """Filesystem failure while reading or writing the workflow file."""

    def __init__(self, operation: str, path: str, exc: Exception) -> None:
        super().__init__(
            "IO_ERROR",
            f"Workflow file {operation} failed.",
            {"path": path, "operation": operation, "error": str(exc)},
        )


def success_response(payload: dict[str, Any]) -> dict[str, Any]:
    """Wrap a successful MCP response in the standard envelope."""
    return {"ok": True, "data": payload}


def error_response(error: ErrorResponse) -> dict[str, Any]:
    """Wrap an error response in the standard envelope."""
    return {"ok": False, "error": error.to_dict()}
