"""Configuration management for the ERP tool bridge."""

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load .env file from project root
# This ensures dotenv works regardless of where the process is started from
project_root = Path(__file__).parent.parent.parent
env_file = project_root / ".env"

# override=False means existing environment variables take precedence
load_dotenv(dotenv_path=env_file, override=False)

PACKAGE_DIR = Path(__file__).parent.parent

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


class ServerConfig(BaseModel):
    """Process-wide, read-only server configuration."""

    model_config = ConfigDict(frozen=True)

    # Backend ERP
    backend_api_base: str = Field(default="http://localhost:8080", description="Base URL of the ERP backend")
    backend_access_token: Optional[str] = Field(default=None, description="Static fallback bearer token")
    backend_user_agent: str = Field(default="erp-tools/0.1")
    backend_verify_tls: bool = Field(
        default=True,
        description="Verify backend TLS certificates. Disable only for self-signed dev backends.",
    )
    backend_timeout: float = Field(default=30.0, gt=0, description="Outbound request timeout in seconds")

    # Content retrieval
    content_download_mode: Literal["csv", "binary"] = "csv"
    runtime_dir_name: str = "runtime"
    runtime_search_root: Path = PACKAGE_DIR

    # Diagnostics and host behaviour
    expose_diagnostics: bool = False
    trust_inbound_bearer: bool = False

    # Application
    app_env: str = "development"
    debug: bool = False

    @field_validator("backend_api_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("backend_access_token")
    @classmethod
    def _blank_token_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.strip() == "":
            return None
        return value


def load_server_config(environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """
    Build a ServerConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Frozen ServerConfig
    """
    env = os.environ if environ is None else environ

    values = {
        "backend_api_base": env.get("BACKEND_API_BASE", "http://localhost:8080"),
        "backend_access_token": env.get("BACKEND_ACCESS_TOKEN"),
        "backend_user_agent": env.get("BACKEND_USER_AGENT", "erp-tools/0.1"),
        "backend_verify_tls": _env_flag(env, "BACKEND_VERIFY_TLS", True),
        "backend_timeout": float(env.get("BACKEND_TIMEOUT_SECONDS", "30")),
        "content_download_mode": env.get("CONTENT_DOWNLOAD_MODE", "csv").lower(),
        "runtime_dir_name": env.get("RUNTIME_DIR_NAME", "runtime"),
        "expose_diagnostics": _env_flag(env, "EXPOSE_DIAGNOSTICS", False),
        "trust_inbound_bearer": _env_flag(env, "TRUST_INBOUND_BEARER", False),
        "app_env": env.get("APP_ENV", "development"),
        "debug": _env_flag(env, "DEBUG", False),
    }
    if env.get("RUNTIME_SEARCH_ROOT"):
        values["runtime_search_root"] = Path(env["RUNTIME_SEARCH_ROOT"])

    return ServerConfig(**values)


config = load_server_config()
