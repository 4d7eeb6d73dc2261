"""Structured logging configuration."""

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from erp_tools import __version__
from erp_tools.infra.config import config

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Noisy libraries; per-request detail already comes from our own loggers
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def build_formatter(app_env: str) -> jsonlogger.JsonFormatter:
    """JSON formatter stamping every line with the service, version and environment."""
    return jsonlogger.JsonFormatter(
        LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        rename_fields={"levelname": "level", "name": "logger"},
        static_fields={"service": "erp-tools", "version": __version__, "env": app_env},
    )


def setup_logging(debug: Optional[bool] = None, app_env: Optional[str] = None) -> logging.Logger:
    """
    Configure the erp_tools logger tree to write JSON lines to stdout.

    Safe to call more than once: existing handlers are replaced.

    Args:
        debug: DEBUG level when true (defaults to config.debug)
        app_env: Value of the "env" field (defaults to config.app_env)
    """
    debug = config.debug if debug is None else debug
    app_env = app_env or config.app_env

    logger = logging.getLogger("erp_tools")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(app_env))
    logger.handlers = [handler]

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    return logger


app_logger = setup_logging()
