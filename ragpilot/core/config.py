"""Client configuration read from the environment.

Values come from os.environ (optionally populated from a .env file by the
caller). Numeric values are validated eagerly so a bad deployment fails at
startup rather than on the first request.
"""

import os
from dataclasses import dataclass

DEFAULT_BACKEND_URL = "http://localhost:8080/api"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by every coordinator."""
    backend_url: str = DEFAULT_BACKEND_URL
    request_timeout: float = 30.0
    upload_timeout: float = 120.0
    query_path: str = "/rag/query"
    use_tool_calling: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from RAG_* environment variables."""
        backend_url = os.environ.get("RAG_BACKEND_URL", "").strip() or DEFAULT_BACKEND_URL
        query_path = os.environ.get("RAG_QUERY_PATH", "").strip() or "/rag/query"
        if not query_path.startswith("/"):
            query_path = "/" + query_path

        return cls(
            backend_url=backend_url.rstrip("/"),
            request_timeout=_env_float("RAG_REQUEST_TIMEOUT", 30.0),
            upload_timeout=_env_float("RAG_UPLOAD_TIMEOUT", 120.0),
            query_path=query_path,
            use_tool_calling=_env_bool("RAG_USE_TOOL_CALLING", False),
            log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
