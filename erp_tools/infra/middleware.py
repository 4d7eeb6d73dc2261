"""Request middleware for tracking, CORS, and other cross-cutting concerns."""

import logging
import os
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from erp_tools.infra.auth import DOWNSTREAM_TOKEN_HEADER
from erp_tools.infra.config import ServerConfig

request_logger = logging.getLogger("erp_tools.request")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID to all requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log request/response details."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")

        # SECURITY: Never log secrets or tokens (headers are not logged)
        start_time = time.time()
        request_logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            request_logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "duration_ms": duration_ms,
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        request_logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["X-Response-Time-Ms"] = str(duration_ms)
        return response


def setup_cors(app: FastAPI, server_config: ServerConfig) -> None:
    """Setup CORS middleware."""
    cors_origins_env = os.getenv("CORS_ORIGINS", "")
    if cors_origins_env:
        allowed_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
        # SECURITY: Never use wildcard outside development
        if server_config.app_env != "development":
            allowed_origins = [origin for origin in allowed_origins if origin != "*"]
    elif server_config.app_env == "development":
        allowed_origins = ["*"]
    else:
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", DOWNSTREAM_TOKEN_HEADER],
        expose_headers=["X-Request-ID", "X-Response-Time-Ms"],
    )
