"""Conversational query session.

Owns the transcript. Each accepted query appends the user's message right
away and exactly one assistant message once the backend answers (or fails).
Only one query may be outstanding; a second one is refused without touching
the transcript.
"""

import asyncio

import structlog
from pydantic import ValidationError

from ragpilot.api.schemas import Message, RagQuery, RagResponse
from ragpilot.core.operation import CANCELLED_MESSAGE, OperationInProgressError, OperationState
from ragpilot.core.transport import HttpTransport, TransportError

logger = structlog.get_logger(__name__)

EMPTY_RESPONSE_TEXT = "Received an empty response."


class QuerySession:
    """Ordered conversation with the RAG assistant."""

    def __init__(self, transport: HttpTransport, query_path: str = "/rag/query",
                 use_tool_calling: bool = False):
        self.transport = transport
        self.query_path = query_path
        self.use_tool_calling = use_tool_calling
        self.transcript: list[Message] = []
        self.input_buffer: str = ""
        self.state = OperationState()

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    async def send_query(self, text: str | None = None,
                         use_tool_calling: bool | None = None) -> Message | None:
        """Send `text` (or the input buffer) and record the answer.

        Args:
            text: Query text. Defaults to the current input buffer.
            use_tool_calling: Per-query override of the session default.

        Returns:
            The assistant message that was appended, or None if the query was
            rejected locally (blank text, or another query still pending).
        """
        query = self.input_buffer if text is None else text
        if not query or not query.strip():
            return None
        tools = self.use_tool_calling if use_tool_calling is None else use_tool_calling

        try:
            async with self.state.pending("send_query"):
                self.transcript.append(Message(sender="user", text=query))
                self.input_buffer = ""
                logger.info("session.query", length=len(query), use_tool_calling=tools)
                try:
                    reply = await self._ask(query, tools)
                except asyncio.CancelledError:
                    self.transcript.append(Message(sender="assistant", text=CANCELLED_MESSAGE, is_error=True))
                    raise
                self.transcript.append(reply)
                return reply
        except OperationInProgressError:
            return None

    async def _ask(self, query: str, use_tool_calling: bool) -> Message:
        body = RagQuery(query=query, use_tool_calling=use_tool_calling)
        try:
            data = await self.transport.send("POST", self.query_path,
                                             json=body.model_dump(by_alias=True))
        except TransportError as e:
            self.state.fail(e.summary)
            return Message(sender="assistant", text=f"Failed to get response: {e.summary}", is_error=True)
        return self._interpret(data)

    def _interpret(self, data) -> Message:
        try:
            response = RagResponse.model_validate(data or {})
        except ValidationError:
            response = RagResponse()

        if response.answer:
            self.state.succeed(None)
            return Message(sender="assistant", text=response.answer)
        if response.error:
            self.state.fail(response.error)
            logger.warning("session.backend_error", error=response.error)
            return Message(sender="assistant", text=f"Error: {response.error}", is_error=True)

        self.state.fail(EMPTY_RESPONSE_TEXT)
        logger.warning("session.empty_response")
        return Message(sender="assistant", text=EMPTY_RESPONSE_TEXT, is_error=True)

    def restart(self) -> None:
        """Start a fresh conversation. Refused while a query is pending."""
        if self.state.is_loading:
            raise OperationInProgressError("restart")
        self.transcript = []
        self.input_buffer = ""
        self.state.reset()
        logger.info("session.restarted")
