"""Shared router for MCP tool endpoints."""

from __future__ import annotations

from fastapi import APIRouter

mcp_router = APIRouter()
