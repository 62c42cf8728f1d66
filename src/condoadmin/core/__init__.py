from __future__ import annotations

from condoadmin.core.collection import RecordCollection
from condoadmin.core.confirmation import ConfirmationGate, PendingAction
from condoadmin.core.errors import (
    DuplicateError,
    EntityServiceError,
    ForeignKeyViolation,
    NotFoundError,
    UnauthorizedError,
    UnknownError,
    ValidationError,
    error_message,
)
from condoadmin.core.tasks import ImmediateTaskRunner, TaskRunner
from condoadmin.core.validation import Validator, run_validator
from condoadmin.core.workflow import (
    EditWorkflow,
    EntityService,
    WorkflowMode,
    WorkflowResult,
    WorkflowState,
)

__all__ = [
    "ConfirmationGate",
    "DuplicateError",
    "EditWorkflow",
    "EntityService",
    "EntityServiceError",
    "ForeignKeyViolation",
    "ImmediateTaskRunner",
    "NotFoundError",
    "PendingAction",
    "RecordCollection",
    "TaskRunner",
    "UnauthorizedError",
    "UnknownError",
    "ValidationError",
    "Validator",
    "WorkflowMode",
    "WorkflowResult",
    "WorkflowState",
    "error_message",
    "run_validator",
]
