"""MCP handler registration."""

# ruff: noqa: F401

from __future__ import annotations

from fastapi import FastAPI

from app.mcp_router import mcp_router

# Import modules to register routes with the shared router.
from app import mcp_tasks, mcp_tools_endpoint

# Re-export endpoints for tests and direct imports.
from app.mcp_tasks import (
    append_task_log,
    get_task_context,
    list_tasks,
    set_task_state,
)
from app.mcp_tools_endpoint import list_tool_schemas


def register_mcp_handlers(app: FastAPI) -> None:
    """Attach MCP routes to the FastAPI application."""
    app.include_router(mcp_router)
