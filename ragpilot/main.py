"""Client entry point: builds every coordinator from the environment.

Startup sequence: load .env → configure logging → build transport →
build coordinators → initial registry + tool loads (concurrently).
"""

import asyncio
from dataclasses import dataclass

import httpx
import structlog
from dotenv import load_dotenv

from ragpilot.coordinators.capabilities import CapabilityClient
from ragpilot.coordinators.indexer import IndexTrigger
from ragpilot.coordinators.ingestion import IngestionCoordinator
from ragpilot.coordinators.registry import SourceRegistryClient
from ragpilot.coordinators.session import QuerySession
from ragpilot.core.config import ClientConfig
from ragpilot.core.logs import configure_logging
from ragpilot.core.transport import HttpTransport

logger = structlog.get_logger(__name__)


@dataclass
class RagWorkspace:
    """All coordinators for one operator session, sharing one transport."""
    config: ClientConfig
    transport: HttpTransport
    registry: SourceRegistryClient
    ingestion: IngestionCoordinator
    indexer: IndexTrigger
    capabilities: CapabilityClient
    session: QuerySession

    async def start(self) -> None:
        """Initial reads. Failures are recorded on each coordinator, never raised."""
        logger.info("startup.begin", backend=self.config.backend_url)
        registry_ok, tools_ok = await asyncio.gather(
            self.registry.refresh(),
            self.capabilities.load_tools(),
        )
        logger.info("startup.complete", registry_ok=registry_ok, tools_ok=tools_ok)

    async def aclose(self) -> None:
        await self.transport.aclose()
        logger.info("shutdown.complete")


def create_workspace(config: ClientConfig | None = None,
                     client: httpx.AsyncClient | None = None) -> RagWorkspace:
    """Wire up a workspace.

    Args:
        config: Settings to use. Defaults to ClientConfig.from_env().
        client: Shared httpx client. When omitted, each request opens its own,
            which keeps the workspace usable across separate event loops.
    """
    config = config or ClientConfig.from_env()
    transport = HttpTransport(config.backend_url, timeout=config.request_timeout, client=client)
    registry = SourceRegistryClient(transport)

    return RagWorkspace(
        config=config,
        transport=transport,
        registry=registry,
        ingestion=IngestionCoordinator(transport, registry, upload_timeout=config.upload_timeout),
        indexer=IndexTrigger(transport),
        capabilities=CapabilityClient(transport),
        session=QuerySession(transport, query_path=config.query_path,
                             use_tool_calling=config.use_tool_calling),
    )


def bootstrap() -> RagWorkspace:
    """Load .env, set up logging and return an unstarted workspace."""
    load_dotenv()
    config = ClientConfig.from_env()
    configure_logging(config.log_level)
    return create_workspace(config)
