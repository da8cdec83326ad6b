"""FastAPI entrypoint for the org workflow MCP server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import load_config
from app.errors import ErrorResponse, McpError, error_response
from app.mcp import register_mcp_handlers

logger = logging.getLogger(__name__)

SERVICE_TOKEN_HEADER = "X-Org-MCP-Service-Token"
AUTH_EXEMPT_PATHS = {"/health"}


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = load_config()
        app.state.config = config
        logger.info("org-mcp serving %s", config.workflow_path)
        yield

    app = FastAPI(lifespan=lifespan)

    @app.middleware("http")
    async def enforce_service_token(request: Request, call_next):
        if request.url.path in AUTH_EXEMPT_PATHS:
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        service_token = getattr(config, "service_token", None)
        if service_token:
            supplied_token = request.headers.get(SERVICE_TOKEN_HEADER)
            if supplied_token != service_token:
                error = ErrorResponse(
                    code="AUTH_FORBIDDEN",
                    message="Invalid service token.",
                    details={"header": SERVICE_TOKEN_HEADER},
                )
                return JSONResponse(
                    status_code=403, content=error_response(error)
                )

        return await call_next(request)

    @app.exception_handler(McpError)
    def handle_mcp_error(request: Request, exc: McpError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_response(exc.error))

    @app.get("/health", status_code=200)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    register_mcp_handlers(app)
    return app


app = create_app()
