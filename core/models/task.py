# ============================================================================
# TASK MODEL
# ============================================================================
# STATUS: Core model - Per-dispatch result record
# PURPOSE: Capture request, response, status, error and timing of a dispatch
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: Task, TaskAlreadyFinalizedError
# DEPENDENCIES: pydantic
# ============================================================================
"""
Task Model

Task = the record produced by one HandlerChain.handle_request() call.

Lifecycle:
    1. Created at the start of a dispatch (status=UNSET, finished_at=None)
    2. Mutated by the engine and by handlers through set_status()
    3. Finalized once: response stored, finished_at stamped, status
       filled with OK if nothing else set it
    4. Never mutated again

The request is held by reference. Handlers mutating a mutable request
mutate the same object the caller passed in.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field, computed_field

from core.contracts import StatusCode, StatusSnapshot, StatusValue

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class TaskAlreadyFinalizedError(Exception):
    """Raised when a task is finalized a second time."""
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task already finalized: {task_id}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(BaseModel, Generic[RequestT, ResponseT]):
    """
    Result record of a single dispatch.

    Status starts at StatusCode.UNSET and becomes StatusCode.OK at
    finalization unless something else was set before.
    """

    model_config = {"arbitrary_types_allowed": True}

    task_id: str = Field(
        default_factory=lambda: uuid.uuid4().hex[:12],
        description="Short id for log correlation"
    )

    # Timing
    received_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = Field(
        default=None,
        description="None until the task is finalized"
    )

    # Payload
    request: RequestT
    response: Optional[ResponseT] = None

    # Outcome
    status: Union[int, str] = Field(default=StatusCode.UNSET)
    error: Optional[BaseException] = None

    @property
    def is_finalized(self) -> bool:
        """Check if the task reached its terminal state."""
        return self.finished_at is not None

    @computed_field
    @property
    def duration_ms(self) -> Optional[float]:
        """Milliseconds between receipt and finalization."""
        if self.finished_at is None:
            return None
        return (self.finished_at - self.received_at).total_seconds() * 1000

    def set_status(self, status: StatusValue, error: Optional[BaseException] = None) -> None:
        """Overwrite status and error together."""
        self.status = status
        self.error = error

    def status_snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(status=self.status, error=self.error)

    def finalize(self, response: Optional[ResponseT]) -> "Task[RequestT, ResponseT]":
        """
        Store the response and close the task.

        Args:
            response: Value the chain produced (None for no response)

        Returns:
            self, for chaining

        Raises:
            TaskAlreadyFinalizedError if called twice
        """
        if self.is_finalized:
            raise TaskAlreadyFinalizedError(self.task_id)

        self.response = response
        self.finished_at = _utcnow()
        if self.status == StatusCode.UNSET:
            self.status = StatusCode.OK
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Summarize for logging.

        Request and response are rendered with repr() since their types
        are caller-defined.
        """
        return {
            "task_id": self.task_id,
            "received_at": self.received_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "status": int(self.status) if isinstance(self.status, int) else self.status,
            "error": repr(self.error) if self.error is not None else None,
            "request": repr(self.request),
            "response": repr(self.response),
        }


__all__ = [
    "Task",
    "TaskAlreadyFinalizedError",
    "RequestT",
    "ResponseT",
]
