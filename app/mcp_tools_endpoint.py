"""Tool definition endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from app.errors import McpError, success_response
from app.mcp_router import mcp_router
from tools.mcp_tools import (
    ToolSchemaError,
    apply_state_keywords,
    load_tool_definitions,
)


@mcp_router.get("/tools")
def list_tool_schemas(request: Request) -> dict[str, Any]:
    """Return the MCP tool definitions with the configured state keywords."""
    try:
        tools = load_tool_definitions()
    except ToolSchemaError as exc:
        raise McpError(
            "TOOL_SCHEMA_ERROR",
            "Tool definitions could not be loaded.",
            {"error": str(exc)},
        ) from exc
    states = request.app.state.config.states
    return success_response({"tools": apply_state_keywords(tools, states)})
