"""Pydantic models for the backend wire format and client-side records.

Response models ignore unknown keys so that additive backend changes do not
break the client. Field aliases follow the backend's JSON names.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Requests

class RagQuery(WireModel):
    """Body of POST /rag/query."""
    query: str = Field(..., min_length=1)
    use_tool_calling: bool = Field(False, alias="useToolCalling")


class AddUrlRequest(WireModel):
    """Body of POST /documents/add-url. fileName is omitted when not given."""
    url: str = Field(..., min_length=1)
    file_name: str | None = Field(None, alias="fileName")


class ToolCallRequest(WireModel):
    """Body of POST /mcp/tools/invoke-direct."""
    tool_name: str = Field(..., min_length=1, alias="toolName")
    arguments: dict[str, Any] = Field(default_factory=dict)


# Responses

class RagResponse(WireModel):
    query: str | None = None
    answer: str | None = None
    error: str | None = None


class UploadedFilesResponse(WireModel):
    location: str = Field("", alias="uploaded_files_location")
    files: list[str] = Field(default_factory=list)


class FileUploadResponse(WireModel):
    """Returned by both /documents/upload and /documents/add-url."""
    message: str | None = None
    path: str | None = None
    next_step: str | None = None
    error: str | None = None


class SimpleMessageResponse(WireModel):
    message: str | None = None
    error: str | None = None


class IndexStatusResponse(WireModel):
    index_status: str = "UNKNOWN"
    message: str | None = None


class IndexSearchResponse(WireModel):
    query: str | None = None
    max_results: int | None = Field(None, alias="maxResults")
    hits: list[Any] | None = None
    error: str | None = None


class CapabilityDescriptor(WireModel):
    """One tool the assistant may call. The full input schema is not fetched."""
    name: str
    description: str = ""
    schema_note: str | None = Field(None, alias="note")
    schema_error: str | None = Field(None, alias="inputSchemaError")


class ToolCallResponse(WireModel):
    tool_name: str | None = Field(None, alias="toolName")
    result: Any = None
    error: str | None = None


# Client-side records

class Message(BaseModel):
    """Single entry in the conversation transcript."""
    sender: Literal["user", "assistant"]
    text: str
    is_error: bool = False
