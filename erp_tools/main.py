"""FastAPI application exposing the ERP tools."""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from erp_tools import __version__
from erp_tools.api.routers import health, mcp, tools
from erp_tools.infra.config import ServerConfig, config
from erp_tools.infra.logging import app_logger
from erp_tools.infra.middleware import RequestIDMiddleware, RequestLoggingMiddleware, setup_cors
from erp_tools.services.tool_registry import build_tools


def create_app(
    server_config: Optional[ServerConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application and its tool registry.

    Args:
        server_config: Configuration (defaults to the process config)
        transport: Optional httpx transport for backend calls (tests)
    """
    server_config = server_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_logger.info(
            "Application starting up",
            extra={
                "backend_api_base": server_config.backend_api_base,
                "tool_count": len(app.state.tools),
                "app_env": server_config.app_env,
            },
        )
        if not server_config.backend_verify_tls:
            app_logger.warning("Backend TLS verification is disabled")
        yield
        app_logger.info("Application shutting down")

    app = FastAPI(
        title="ERP Tools API",
        description="""
    Data-access tools over an ERP backend's generic find and service API.

    ## Endpoints

    - **Tools**: list tools and invoke one by name
    - **MCP**: JSON-RPC 2.0 `tools/list` and `tools/call`

    ## Authentication

    A delegated backend token may be passed per request in `X-Downstream-Token`.
    Otherwise the server's configured token is used, if any.
    """,
        version=__version__,
        lifespan=lifespan,
        tags_metadata=[
            {"name": "Tools", "description": "List and invoke ERP tools"},
            {"name": "MCP", "description": "JSON-RPC 2.0 tool protocol endpoint"},
            {"name": "Health", "description": "Health check endpoints"},
        ],
    )
    app.state.server_config = server_config
    app.state.tools = build_tools(server_config, transport=transport)

    # Last added runs first: request IDs must exist before request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    setup_cors(app, server_config)

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(mcp.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        return JSONResponse(status_code=422, content={"detail": exc.errors()})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        error_id = str(uuid.uuid4())
        app_logger.error(f"Unhandled exception: {exc}", exc_info=True, extra={"error_id": error_id})
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal server error. Error ID: {error_id}"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
