"""Payload validation helpers for MCP endpoints."""

from __future__ import annotations

from typing import Any

from app.errors import McpError


def _ensure_payload_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise McpError(
            "INVALID_TYPE",
            "Payload must be an object.",
            {"type": type(payload).__name__},
        )
    return payload


def _reject_unknown_fields(payload: dict[str, Any], allowed_fields: set[str]) -> None:
    unknown_fields = sorted(set(payload) - allowed_fields)
    if unknown_fields:
        raise McpError(
            "UNKNOWN_FIELD",
            "Unknown fields are not allowed.",
            {"fields": unknown_fields},
        )


def _require_fields(payload: dict[str, Any], required_fields: list[str]) -> None:
    missing = [name for name in required_fields if name not in payload]
    if missing:
        raise McpError(
            "MISSING_FIELDS",
            f"{' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} required.",
            {"fields": missing},
        )


def _string_field(
    payload: dict[str, Any], name: str, *, required: bool = False
) -> str | None:
    value = payload.get(name)
    if value is None and not required:
        return None
    if not isinstance(value, str):
        raise McpError(
            "INVALID_TYPE",
            f"{name} must be a string.",
            {"field": name, "type": type(value).__name__},
        )
    return value
