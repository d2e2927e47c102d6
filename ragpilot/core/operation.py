"""Per-coordinator operation state with an explicit in-flight guard.

Each coordinator owns one OperationState and wraps every backend call in
`pending()`. The state machine is Idle -> Pending -> Idle; entering Pending
while already Pending raises OperationInProgressError instead of starting a
second overlapping request.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

CANCELLED_MESSAGE = "Request cancelled."


class OperationInProgressError(Exception):
    """Raised when a coordinator is asked to start a call while one is pending."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot start '{operation}': another request is still in progress.")
        self.operation = operation


@dataclass
class OperationState:
    """Transient state shown next to a coordinator's controls."""
    is_loading: bool = False
    last_message: str | None = None
    last_error: str | None = None
    active_operation: str | None = None

    def succeed(self, message: str | None) -> None:
        self.last_message = message
        self.last_error = None

    def fail(self, error: str) -> None:
        self.last_error = error
        self.last_message = None

    def reset(self) -> None:
        self.last_message = None
        self.last_error = None

    @asynccontextmanager
    async def pending(self, operation: str, clear: bool = True):
        """Hold the Pending state for the duration of the block.

        Args:
            operation: Name used in logs and in the rejection error.
            clear: Drop the previous message/error when the call starts.

        Raises:
            OperationInProgressError: If another call is already pending.
        """
        if self.is_loading:
            logger.warning("operation.rejected", operation=operation, active=self.active_operation)
            raise OperationInProgressError(operation)

        self.is_loading = True
        self.active_operation = operation
        if clear:
            self.reset()
        try:
            yield self
        except asyncio.CancelledError:
            self.fail(CANCELLED_MESSAGE)
            logger.warning("operation.cancelled", operation=operation)
            raise
        finally:
            self.is_loading = False
            self.active_operation = None
