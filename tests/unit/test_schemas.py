"""Unit tests for Pydantic wire schemas."""

import pytest
from pydantic import ValidationError

from ragpilot.api.schemas import (
    AddUrlRequest,
    CapabilityDescriptor,
    FileUploadResponse,
    Message,
    RagQuery,
    RagResponse,
    UploadedFilesResponse,
)


class TestRagQuery:

    def test_serializes_with_backend_names(self):
        req = RagQuery(query="What is X?", use_tool_calling=True)
        assert req.model_dump(by_alias=True) == {"query": "What is X?", "useToolCalling": True}

    def test_tool_calling_defaults_off(self):
        assert RagQuery(query="q").use_tool_calling is False

    def test_empty_query_rejected(self):
        with pytest.raises(ValidationError):
            RagQuery(query="")


class TestAddUrlRequest:

    def test_filename_omitted_when_absent(self):
        req = AddUrlRequest(url="https://example.com")
        assert req.model_dump(by_alias=True, exclude_none=True) == {"url": "https://example.com"}

    def test_accepts_backend_alias(self):
        assert AddUrlRequest.model_validate({"url": "u", "fileName": "f.html"}).file_name == "f.html"


class TestResponses:

    def test_rag_response_optional_fields(self):
        resp = RagResponse.model_validate({"query": "q"})
        assert resp.answer is None
        assert resp.error is None

    def test_unknown_keys_ignored(self):
        resp = FileUploadResponse.model_validate(
            {"message": "ok", "details": "Trigger a re-index", "fileName": "a.txt"}
        )
        assert resp.message == "ok"
        assert resp.next_step is None

    def test_uploaded_files_alias(self):
        resp = UploadedFilesResponse.model_validate({"uploaded_files_location": "/u", "files": ["a"]})
        assert resp.location == "/u"

    def test_capability_requires_name(self):
        with pytest.raises(ValidationError):
            CapabilityDescriptor.model_validate({"description": "no name"})


class TestMessage:

    def test_error_flag_defaults_false(self):
        assert Message(sender="user", text="hi").is_error is False

    def test_invalid_sender_rejected(self):
        with pytest.raises(ValidationError):
            Message(sender="system", text="hello")
