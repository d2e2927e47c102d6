"""Unit tests for environment-driven client configuration."""

import pytest

from ragpilot.core.config import DEFAULT_BACKEND_URL, ClientConfig

ENV_VARS = [
    "RAG_BACKEND_URL", "RAG_REQUEST_TIMEOUT", "RAG_UPLOAD_TIMEOUT",
    "RAG_QUERY_PATH", "RAG_USE_TOOL_CALLING", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = ClientConfig.from_env()
    assert config.backend_url == DEFAULT_BACKEND_URL == "http://localhost:8080/api"
    assert config.request_timeout == 30.0
    assert config.upload_timeout == 120.0
    assert config.query_path == "/rag/query"
    assert config.use_tool_calling is False
    assert config.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("RAG_BACKEND_URL", "https://rag.internal/api/")
    monkeypatch.setenv("RAG_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("RAG_QUERY_PATH", "v2/query")
    monkeypatch.setenv("RAG_USE_TOOL_CALLING", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = ClientConfig.from_env()

    assert config.backend_url == "https://rag.internal/api"
    assert config.request_timeout == 2.5
    assert config.query_path == "/v2/query"
    assert config.use_tool_calling is True
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["abc", "0", "-1"])
def test_invalid_timeout_rejected(monkeypatch, value):
    monkeypatch.setenv("RAG_REQUEST_TIMEOUT", value)
    with pytest.raises(ValueError, match="RAG_REQUEST_TIMEOUT"):
        ClientConfig.from_env()
