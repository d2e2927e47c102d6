"""Corpus rebuild trigger and index diagnostics.

The backend rebuilds asynchronously. rebuild_index() only confirms that the
job was accepted; callers must not assume the corpus is updated when it
returns. index_status() is a separate read and is not polled.
"""

from dataclasses import dataclass, field

import structlog
from pydantic import ValidationError

from ragpilot.api.schemas import IndexSearchResponse, IndexStatusResponse, SimpleMessageResponse
from ragpilot.core.operation import OperationInProgressError, OperationState
from ragpilot.core.transport import HttpTransport, TransportError

logger = structlog.get_logger(__name__)

REBUILD_PATH = "/anserini/index/rebuild"
SEARCH_PATH = "/anserini/search"
STATUS_PATH = "/indexer/status"

DEFAULT_REBUILD_MESSAGE = "Index rebuild initiated successfully!"
MAX_SEARCH_RESULTS = 50


@dataclass
class SimpleOutcome:
    """Result of a call that returns just a message or an error."""
    message: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class IndexStatus:
    available: bool
    message: str = ""


@dataclass
class SearchResult:
    query: str
    max_results: int
    hits: list = field(default_factory=list)
    error: str | None = None


class IndexTrigger:
    """Starts index rebuilds and exposes the diagnostic index endpoints."""

    def __init__(self, transport: HttpTransport):
        self.transport = transport
        self.state = OperationState()
        self.last_status: IndexStatus | None = None

    async def rebuild_index(self) -> SimpleOutcome:
        """Ask the backend to rebuild the index. Success means accepted, not done."""
        try:
            async with self.state.pending("rebuild_index"):
                try:
                    data = await self.transport.send("POST", REBUILD_PATH, json={})
                    response = SimpleMessageResponse.model_validate(data or {})
                except TransportError as e:
                    return self._failed(e.message)
                except ValidationError:
                    return self._failed("Unexpected response from the backend.")

                if response.error and not response.message:
                    return self._failed(response.error)

                message = response.message or DEFAULT_REBUILD_MESSAGE
                self.state.succeed(message)
                logger.info("indexer.rebuild_accepted", message=message)
                return SimpleOutcome(message=message)
        except OperationInProgressError as e:
            return SimpleOutcome(error=str(e))

    async def index_status(self) -> IndexStatus | None:
        """Read whether the backend currently has a usable index.

        Returns:
            The status, or None when the backend could not be asked.
        """
        try:
            data = await self.transport.send("GET", STATUS_PATH)
            response = IndexStatusResponse.model_validate(data or {})
        except TransportError as e:
            self.state.fail(f"Failed to check index status: {e.message}")
            return None
        except ValidationError:
            self.state.fail("Failed to check index status: unexpected response from the backend.")
            return None

        status = IndexStatus(
            available=response.index_status.upper() == "AVAILABLE",
            message=response.message or "",
        )
        self.last_status = status
        logger.info("indexer.status", available=status.available)
        return status

    async def search_index(self, query: str, max_results: int = 5) -> SearchResult:
        """Run a raw retrieval against the index, bypassing the language model."""
        if not query or not query.strip():
            return SearchResult(query=query or "", max_results=max_results,
                                error="Query cannot be empty.")
        if max_results <= 0 or max_results > MAX_SEARCH_RESULTS:
            return SearchResult(query=query, max_results=max_results,
                                error=f"maxResults must be between 1 and {MAX_SEARCH_RESULTS}.")

        try:
            data = await self.transport.send(
                "GET", SEARCH_PATH,
                params={"query": query, "maxResults": str(max_results)},
            )
            response = IndexSearchResponse.model_validate(data or {})
        except TransportError as e:
            return SearchResult(query=query, max_results=max_results, error=e.message)
        except ValidationError:
            return SearchResult(query=query, max_results=max_results,
                                error="Unexpected response from the backend.")

        logger.debug("indexer.search", query=query, hits=len(response.hits or []))
        return SearchResult(
            query=response.query or query,
            max_results=response.max_results or max_results,
            hits=response.hits or [],
            error=response.error,
        )

    def _failed(self, detail: str) -> SimpleOutcome:
        self.state.fail(f"Failed to rebuild index: {detail}")
        logger.warning("indexer.rebuild_failed", detail=detail)
        return SimpleOutcome(error=detail)
