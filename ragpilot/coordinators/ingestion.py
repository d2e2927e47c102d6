"""Ingestion coordinator: file uploads and URL sources.

A successful ingestion only places the document in the backend's upload
directory. The uploaded-file list is re-read from the registry afterwards
and the operator is shown the backend's next-step hint (usually "rebuild the
index"); nothing here triggers the rebuild itself.
"""

from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from ragpilot.api.schemas import AddUrlRequest, FileUploadResponse
from ragpilot.coordinators.registry import SourceRegistryClient
from ragpilot.core.operation import OperationInProgressError, OperationState
from ragpilot.core.transport import HttpTransport, TransportError

logger = structlog.get_logger(__name__)

UPLOAD_PATH = "/documents/upload"
ADD_URL_PATH = "/documents/add-url"


@dataclass(frozen=True)
class FileUpload:
    content: bytes
    filename: str


@dataclass(frozen=True)
class UrlAdd:
    url: str
    filename: str | None = None


IngestionRequest = FileUpload | UrlAdd


@dataclass
class IngestionOutcome:
    """Successful ingestion as reported by the backend."""
    message: str
    storage_path: str | None = None
    next_step_hint: str | None = None
    ok: bool = True

    @property
    def display_message(self) -> str:
        if self.next_step_hint:
            return f"{self.message} Next: {self.next_step_hint}"
        return self.message


@dataclass
class IngestionError:
    """Failed or rejected ingestion."""
    detail: str
    ok: bool = False


class IngestionCoordinator:
    """Submits documents to the backend and keeps the operator's inputs.

    Holds the pending file selection and the URL/filename input fields so
    that they can be cleared on success and kept on failure.
    """

    def __init__(self, transport: HttpTransport, registry: SourceRegistryClient,
                 upload_timeout: float | None = None):
        self.transport = transport
        self.registry = registry
        self.upload_timeout = upload_timeout
        self.state = OperationState()
        self.pending_file: FileUpload | None = None
        self.url_input: str = ""
        self.filename_input: str = ""

    def select_file(self, content: bytes | None, filename: str | None) -> None:
        """Remember the file the operator picked, or clear the selection.

        Ignored while a request is pending. Re-selecting the current file
        leaves the last outcome in place.
        """
        if self.state.is_loading:
            logger.warning("ingestion.select_ignored", filename=filename,
                           active=self.state.active_operation)
            return
        if content is None or not filename:
            self.pending_file = None
            return
        selection = FileUpload(content=content, filename=filename)
        if selection == self.pending_file:
            return
        self.pending_file = selection
        self.state.succeed(f"Selected file: {filename}")

    async def upload_file(self, content: bytes | None = None,
                          filename: str | None = None) -> IngestionOutcome | IngestionError:
        """Upload `content` as `filename`, or the pending selection if omitted."""
        if self.state.is_loading:
            return self._busy("upload")
        if content is not None and filename:
            self.select_file(content, filename)
        if self.pending_file is None:
            return self._reject("Please select a file to upload.")
        return await self.submit(self.pending_file)

    async def add_url(self, url: str | None = None,
                      filename: str | None = None) -> IngestionOutcome | IngestionError:
        """Register a URL source. Arguments overwrite the input fields."""
        if self.state.is_loading:
            return self._busy("add_url")
        if url is not None:
            self.url_input = url
        if filename is not None:
            self.filename_input = filename
        if not self.url_input.strip():
            return self._reject("Please enter a URL.")
        return await self.submit(UrlAdd(url=self.url_input, filename=self.filename_input or None))

    async def submit(self, request: IngestionRequest) -> IngestionOutcome | IngestionError:
        """Send one ingestion request, then re-read the uploaded-file list."""
        if isinstance(request, FileUpload):
            operation, failure_prefix = "upload", "File upload failed"
        else:
            operation, failure_prefix = "add_url", "Failed to add URL"

        try:
            async with self.state.pending(operation):
                try:
                    data = await self._send(request)
                    outcome = self._interpret(request, data)
                except TransportError as e:
                    outcome = IngestionError(detail=e.message)

                if not outcome.ok:
                    self.state.fail(f"{failure_prefix}: {outcome.detail}")
                    logger.warning(f"ingestion.{operation}_failed", detail=outcome.detail)
                    return outcome

                self.state.succeed(outcome.display_message)
                self._clear_inputs(request)
                logger.info(f"ingestion.{operation}_ok", message=outcome.message,
                            next_step=outcome.next_step_hint)
                await self.registry.load_uploaded_files()
                return outcome
        except OperationInProgressError as e:
            return IngestionError(detail=str(e))

    async def _send(self, request: IngestionRequest):
        if isinstance(request, FileUpload):
            return await self.transport.send(
                "POST", UPLOAD_PATH,
                files={"file": (request.filename, request.content)},
                timeout=self.upload_timeout,
            )
        body = AddUrlRequest(url=request.url, file_name=request.filename)
        return await self.transport.send(
            "POST", ADD_URL_PATH,
            json=body.model_dump(by_alias=True, exclude_none=True),
            timeout=self.upload_timeout,
        )

    @staticmethod
    def _interpret(request: IngestionRequest, data) -> IngestionOutcome | IngestionError:
        try:
            response = FileUploadResponse.model_validate(data or {})
        except ValidationError:
            return IngestionError(detail="Unexpected response from the backend.")
        if response.error and not response.message:
            return IngestionError(detail=response.error)

        default = "File uploaded successfully!" if isinstance(request, FileUpload) else "URL added successfully!"
        return IngestionOutcome(
            message=response.message or default,
            storage_path=response.path,
            next_step_hint=response.next_step,
        )

    def _clear_inputs(self, request: IngestionRequest) -> None:
        if isinstance(request, FileUpload):
            self.pending_file = None
        else:
            self.url_input = ""
            self.filename_input = ""

    def _reject(self, detail: str) -> IngestionError:
        self.state.fail(detail)
        return IngestionError(detail=detail)

    def _busy(self, operation: str) -> IngestionError:
        logger.warning("operation.rejected", operation=operation, active=self.state.active_operation)
        return IngestionError(detail=str(OperationInProgressError(operation)))
