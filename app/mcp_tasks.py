"""Task-related MCP endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request

from app.config import AppConfig
from app.errors import McpError, success_response
from app.mcp_payload import (
    _ensure_payload_dict,
    _reject_unknown_fields,
    _require_fields,
    _string_field,
)
from app.mcp_router import mcp_router
from app.org_mutations import (
    append_task_log as append_log_entry,
    format_log_timestamp,
    sanitize_log_entry,
    set_task_state as rewrite_task_state,
)
from app.org_tasks import OrgTask, extract_tasks, get_task_context as read_task_context
from app.workflow_store import read_workflow_file, update_workflow_file

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500
NO_TASKS_TEXT = "No matching tasks (tasks must have :ID: in properties)."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_config(request: Request) -> AppConfig:
    return request.app.state.config


@mcp_router.post("/tool:list_tasks")
def list_tasks(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """List tasks with an :ID: property, optionally filtered by state or title."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"state", "query", "limit"})

    state = _string_field(payload, "state")
    query = _string_field(payload, "query")
    limit = _validate_limit(payload.get("limit"))

    config = _get_config(request)
    if state:
        state = config.states.validate(state)

    tasks = extract_tasks(read_workflow_file(config.workflow_path), config.states)
    filtered = _filter_tasks(tasks, state, query, limit)
    return success_response(
        {
            "tasks": [task.to_dict() for task in filtered],
            "count": len(filtered),
            "text": _render_task_lines(filtered),
        }
    )


@mcp_router.post("/tool:get_task_context")
def get_task_context(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Return a task's metadata and its 'Agent Context' section."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_id"})
    _require_fields(payload, ["task_id"])
    task_id = _string_field(payload, "task_id", required=True)

    config = _get_config(request)
    text = read_workflow_file(config.workflow_path)
    context = read_task_context(text, task_id, config.states)
    return success_response(context.to_dict())


@mcp_router.post("/tool:set_task_state")
def set_task_state(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Set the state keyword on a task heading."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_id", "state"})
    _require_fields(payload, ["task_id", "state"])
    task_id = _string_field(payload, "task_id", required=True)
    state = _string_field(payload, "state", required=True)

    config = _get_config(request)
    state = config.states.validate(state)
    update_workflow_file(
        config.workflow_path,
        lambda text: rewrite_task_state(text, task_id, state, config.states),
        timeout=config.lock_timeout,
    )
    logger.info("Task %s set to %s", task_id, state)
    return success_response(
        {
            "id": task_id,
            "state": state,
            "message": f"Updated task {task_id} -> {state}",
        }
    )


@mcp_router.post("/tool:append_task_log")
def append_task_log(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Append a timestamped entry under the task's 'Log' section."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"task_id", "entry"})
    _require_fields(payload, ["task_id", "entry"])
    task_id = _string_field(payload, "task_id", required=True)
    entry = _string_field(payload, "entry", required=True)
    if not sanitize_log_entry(entry):
        raise McpError(
            "EMPTY_ENTRY",
            "entry must contain text.",
            {"fields": ["entry"]},
        )

    config = _get_config(request)
    timestamp = _utcnow()
    update_workflow_file(
        config.workflow_path,
        lambda text: append_log_entry(
            text, task_id, entry, timestamp=timestamp, states=config.states
        ),
        timeout=config.lock_timeout,
    )
    logger.info("Appended log entry to task %s", task_id)
    return success_response(
        {
            "id": task_id,
            "timestamp": format_log_timestamp(timestamp),
            "message": f"Appended log entry to task {task_id}",
        }
    )


def _validate_limit(raw_limit: Any) -> int | None:
    if raw_limit is None:
        return None
    if isinstance(raw_limit, bool) or not isinstance(raw_limit, int):
        raise McpError(
            "INVALID_TYPE",
            "limit must be an integer.",
            {"limit": str(raw_limit)},
        )
    if raw_limit < 1 or raw_limit > MAX_LIST_LIMIT:
        raise McpError(
            "INVALID_LIMIT",
            f"limit must be between 1 and {MAX_LIST_LIMIT}.",
            {"limit": raw_limit},
        )
    return raw_limit


def _filter_tasks(
    tasks: list[OrgTask], state: str | None, query: str | None, limit: int | None
) -> list[OrgTask]:
    if state:
        tasks = [task for task in tasks if task.state == state]
    if query:
        needle = query.lower()
        tasks = [task for task in tasks if needle in task.title.lower()]
    if limit is not None:
        tasks = tasks[:limit]
    return tasks


def _render_task_lines(tasks: list[OrgTask]) -> str:
    if not tasks:
        return NO_TASKS_TEXT
    return "\n".join(f"{task.id}\t{task.state or ''}\t{task.title}" for task in tasks)
