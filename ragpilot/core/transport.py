"""HTTP transport for the RAG backend.

Every coordinator talks to the backend through HttpTransport.send(). Failures
of any shape (connection refused, timeout, non-2xx with or without a JSON body,
unparseable 2xx body) are normalized into a single TransportError and logged
before being raised, so callers only ever handle one exception type.
"""

import asyncio
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

NETWORK = "network"
TIMEOUT = "timeout"
STATUS = "status"
MALFORMED = "malformed"


class TransportError(Exception):
    """A request that did not produce a usable response.

    Attributes:
        summary: One-line description of what failed (method, URL, status).
        detail: Backend-provided explanation, when there is one.
        kind: network, timeout, status or malformed.
        status_code: HTTP status for status errors, else None.
    """

    def __init__(self, summary: str, detail: str | None = None,
                 kind: str = NETWORK, status_code: int | None = None):
        super().__init__(summary)
        self.summary = summary
        self.detail = detail
        self.kind = kind
        self.status_code = status_code

    @property
    def message(self) -> str:
        """Detail if the backend gave one, otherwise the summary."""
        return self.detail or self.summary


def extract_error_detail(response: httpx.Response) -> str:
    """Pick the most useful explanation out of a failed response.

    Structured `{"error": ...}` bodies win, then the raw body text, then a
    generic message built from the status code.
    """
    text = response.text.strip()
    if text:
        try:
            body = response.json()
        except ValueError:
            return text
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return text
    return f"Server responded with status {response.status_code}."


class HttpTransport:
    """Sends JSON/multipart requests relative to the backend base URL."""

    def __init__(self, base_url: str, timeout: float = 30.0,
                 client: httpx.AsyncClient | None = None):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self._client = client

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict | None = None,
        files: dict | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        Args:
            method: HTTP verb.
            path: Route relative to the base URL, e.g. "/documents/sources".
            json: JSON request body.
            params: Query string parameters.
            files: Multipart files, httpx style: {"file": (name, bytes)}.
            timeout: Override for this request, in seconds.

        Returns:
            Parsed JSON, or None when the success body is empty.

        Raises:
            TransportError: For every failure shape.
        """
        url = self.url_for(path)
        wait = timeout if timeout is not None else self.timeout
        logger.debug("transport.request", method=method, url=url)

        # httpx applies `wait` per phase; wait_for bounds the whole exchange
        try:
            response = await asyncio.wait_for(
                self._request(method, url, json=json, params=params, files=files, timeout=wait),
                wait,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise self._fail(TransportError(
                f"{method} {url} timed out after {wait:g}s", kind=TIMEOUT,
            ), error=str(e))
        except httpx.RequestError as e:
            raise self._fail(TransportError(
                f"Could not reach {url}: {str(e) or type(e).__name__}", kind=NETWORK,
            ), error=str(e))

        if not response.is_success:
            detail = extract_error_detail(response)
            raise self._fail(TransportError(
                f"Http failure response for {url}: {response.status_code} {response.reason_phrase}".rstrip(),
                detail=detail,
                kind=STATUS,
                status_code=response.status_code,
            ))

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError:
            raise self._fail(TransportError(
                f"Invalid JSON in response from {url}",
                detail=response.text[:200],
                kind=MALFORMED,
                status_code=response.status_code,
            ))

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, **kwargs)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    @staticmethod
    def _fail(err: TransportError, **context) -> TransportError:
        logger.error("transport.error", kind=err.kind, summary=err.summary,
                     detail=err.detail, status=err.status_code, **context)
        return err
