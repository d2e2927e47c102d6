"""Source registry client: configured sources and uploaded files.

Both reads are idempotent. The snapshot lists are replaced wholesale on a
successful read and left untouched on failure, so a flaky backend never
leaves the operator with a half-updated view.
"""

import asyncio
from dataclasses import dataclass, field

import structlog
from pydantic import TypeAdapter, ValidationError

from ragpilot.api.schemas import UploadedFilesResponse
from ragpilot.core.operation import OperationInProgressError, OperationState
from ragpilot.core.transport import MALFORMED, HttpTransport, TransportError

logger = structlog.get_logger(__name__)

SOURCES_PATH = "/documents/sources"
UPLOADED_FILES_PATH = "/documents/uploaded-files"

_sources_adapter = TypeAdapter(list[str])


@dataclass
class SourceRegistrySnapshot:
    """Point-in-time view of what the backend will index."""
    configured_sources: list[str] = field(default_factory=list)
    uploaded_files: list[str] = field(default_factory=list)
    storage_location: str = ""


class SourceRegistryClient:
    """Keeps a SourceRegistrySnapshot in sync with the backend."""

    def __init__(self, transport: HttpTransport):
        self.transport = transport
        self.snapshot = SourceRegistrySnapshot()
        self.state = OperationState()

    async def list_configured_sources(self) -> list[str]:
        data = await self.transport.send("GET", SOURCES_PATH)
        try:
            return _sources_adapter.validate_python(data or [])
        except ValidationError as e:
            raise TransportError(
                f"Unexpected configured-sources payload from {self.transport.url_for(SOURCES_PATH)}",
                detail=str(e), kind=MALFORMED,
            )

    async def list_uploaded_files(self) -> UploadedFilesResponse:
        data = await self.transport.send("GET", UPLOADED_FILES_PATH)
        try:
            return UploadedFilesResponse.model_validate(data or {})
        except ValidationError as e:
            raise TransportError(
                f"Unexpected uploaded-files payload from {self.transport.url_for(UPLOADED_FILES_PATH)}",
                detail=str(e), kind=MALFORMED,
            )

    async def load_configured_sources(self) -> bool:
        """Refresh the configured-source list. Returns True on success."""
        try:
            sources = await self.list_configured_sources()
        except TransportError as e:
            logger.warning("registry.sources_failed", error=e.message)
            self.state.fail(f"Failed to load configured sources: {e.message}")
            return False
        self.snapshot.configured_sources = sources
        logger.info("registry.sources_loaded", count=len(sources))
        return True

    async def load_uploaded_files(self) -> bool:
        """Refresh the uploaded-file list and storage location."""
        try:
            uploaded = await self.list_uploaded_files()
        except TransportError as e:
            logger.warning("registry.files_failed", error=e.message)
            self.state.fail(f"Failed to load uploaded files: {e.message}")
            return False
        self.snapshot.uploaded_files = uploaded.files
        self.snapshot.storage_location = uploaded.location
        logger.info("registry.files_loaded", count=len(uploaded.files), location=uploaded.location)
        return True

    async def refresh(self) -> bool:
        """Run both reads concurrently; one failing does not abort the other.

        Returns:
            True only if both reads succeeded. False as well when another
            refresh is still pending; that call issues no requests.
        """
        try:
            async with self.state.pending("refresh"):
                sources_ok, files_ok = await asyncio.gather(
                    self.load_configured_sources(),
                    self.load_uploaded_files(),
                )
        except OperationInProgressError:
            return False
        return sources_ok and files_ok
