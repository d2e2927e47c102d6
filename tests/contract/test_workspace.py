"""Contract tests for workspace wiring and the full ingest → rebuild flow."""

import httpx
import pytest
import structlog

from ragpilot.core.config import ClientConfig
from ragpilot.main import bootstrap, create_workspace


@pytest.fixture
def workspace(backend):
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    config = ClientConfig(backend_url="http://backend.test/api", request_timeout=5)
    return create_workspace(config, client=client)


def stock_routes(backend):
    backend.on("GET", "/documents/sources", json=["file:/corpus"])
    backend.on("GET", "/documents/uploaded-files",
               json={"uploaded_files_location": "/u", "files": ["a.txt"]})
    backend.on("GET", "/mcp/tools/list", json=[{"name": "rag_query", "description": "RAG"}])


class TestStart:

    @pytest.mark.asyncio
    async def test_start_loads_registry_and_tools(self, workspace, backend):
        stock_routes(backend)

        await workspace.start()

        assert workspace.registry.snapshot.configured_sources == ["file:/corpus"]
        assert workspace.registry.snapshot.uploaded_files == ["a.txt"]
        assert [t.name for t in workspace.capabilities.tools] == ["rag_query"]

    @pytest.mark.asyncio
    async def test_start_survives_offline_backend(self, workspace, backend):
        for path in ("/documents/sources", "/documents/uploaded-files", "/mcp/tools/list"):
            backend.on("GET", path, httpx.ConnectError("refused"))

        await workspace.start()

        assert workspace.registry.state.last_error is not None
        assert workspace.capabilities.state.last_error is not None
        assert workspace.registry.snapshot.uploaded_files == []

    def test_coordinators_share_transport(self, workspace):
        assert workspace.ingestion.transport is workspace.transport
        assert workspace.ingestion.registry is workspace.registry
        assert workspace.session.transport is workspace.transport
        assert workspace.ingestion.upload_timeout == workspace.config.upload_timeout


class TestIngestThenRebuild:

    @pytest.mark.asyncio
    async def test_upload_refresh_rebuild_sequence(self, workspace, backend):
        stock_routes(backend)
        await workspace.start()

        backend.on("POST", "/documents/upload", json={"message": "uploaded", "next_step": "rebuild"})
        backend.on("GET", "/documents/uploaded-files",
                   json={"uploaded_files_location": "/u", "files": ["a.txt", "b.txt"]})
        backend.on("POST", "/anserini/index/rebuild", json={})

        outcome = await workspace.ingestion.upload_file(b"b", "b.txt")
        assert outcome.display_message == "uploaded Next: rebuild"
        assert workspace.registry.snapshot.uploaded_files == ["a.txt", "b.txt"]

        result = await workspace.indexer.rebuild_index()
        assert result.message == "Index rebuild initiated successfully!"

        order = [(r.method, r.url.path) for r in backend.requests[3:]]
        assert order == [
            ("POST", "/api/documents/upload"),
            ("GET", "/api/documents/uploaded-files"),
            ("POST", "/api/anserini/index/rebuild"),
        ]

    @pytest.mark.asyncio
    async def test_ingestion_does_not_refetch_tools(self, workspace, backend):
        stock_routes(backend)
        backend.on("POST", "/documents/add-url", json={"message": "added"})
        await workspace.start()

        await workspace.ingestion.add_url("https://example.com")

        assert len(backend.calls("GET", "/mcp/tools/list")) == 1

    @pytest.mark.asyncio
    async def test_aclose(self, workspace):
        await workspace.aclose()
        assert workspace.transport._client.is_closed


class TestBootstrap:

    def test_bootstrap_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RAG_BACKEND_URL", "http://rag.example/api/")
        monkeypatch.setenv("RAG_USE_TOOL_CALLING", "true")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        try:
            workspace = bootstrap()
            assert workspace.config.backend_url == "http://rag.example/api"
            assert workspace.transport.base_url == "http://rag.example/api"
            assert workspace.session.use_tool_calling is True
        finally:
            structlog.reset_defaults()
