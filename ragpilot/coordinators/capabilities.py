"""Capability discovery: which tools the assistant may call.

Tool availability does not depend on the document corpus, so the snapshot
is only re-fetched when load_tools() is called explicitly.
"""

from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from ragpilot.api.schemas import CapabilityDescriptor, ToolCallRequest, ToolCallResponse
from ragpilot.core.operation import OperationInProgressError, OperationState
from ragpilot.core.transport import MALFORMED, HttpTransport, TransportError

logger = structlog.get_logger(__name__)

LIST_TOOLS_PATH = "/mcp/tools/list"
INVOKE_TOOL_PATH = "/mcp/tools/invoke-direct"

_tools_adapter = TypeAdapter(list[CapabilityDescriptor])


class CapabilityClient:
    """Lists tool capabilities and optionally invokes one directly."""

    def __init__(self, transport: HttpTransport):
        self.transport = transport
        self.tools: list[CapabilityDescriptor] = []
        self.state = OperationState()

    async def list_tools(self) -> list[CapabilityDescriptor]:
        data = await self.transport.send("GET", LIST_TOOLS_PATH)
        try:
            return _tools_adapter.validate_python(data or [])
        except ValidationError as e:
            raise TransportError(
                f"Unexpected tool list payload from {self.transport.url_for(LIST_TOOLS_PATH)}",
                detail=str(e), kind=MALFORMED,
            )

    async def load_tools(self) -> bool:
        """Replace the in-memory tool snapshot. Keeps the old one on failure."""
        try:
            async with self.state.pending("load_tools"):
                try:
                    tools = await self.list_tools()
                except TransportError as e:
                    self.state.fail(f"Failed to load tools: {e.message}")
                    return False
                self.tools = tools
                logger.info("capabilities.loaded", count=len(tools))
                return True
        except OperationInProgressError:
            return False

    async def invoke_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolCallResponse:
        """Call a tool directly, outside of a chat turn.

        Returns:
            The backend's response; `error` is set on any failure.
        """
        if not name or not name.strip():
            return ToolCallResponse(error="toolName cannot be empty.")

        body = ToolCallRequest(tool_name=name.strip(), arguments=arguments or {})
        try:
            data = await self.transport.send(
                "POST", INVOKE_TOOL_PATH, json=body.model_dump(by_alias=True),
            )
            response = ToolCallResponse.model_validate(data or {})
        except TransportError as e:
            return ToolCallResponse(tool_name=body.tool_name, error=e.message)
        except ValidationError:
            return ToolCallResponse(tool_name=body.tool_name,
                                    error="Unexpected response from the backend.")

        logger.info("capabilities.invoked", tool=body.tool_name, ok=response.error is None)
        return response
