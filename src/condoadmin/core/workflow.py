from __future__ import annotations

import copy
import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Protocol, Sequence, TypeVar

from condoadmin.core.confirmation import ConfirmationGate
from condoadmin.core.errors import error_message
from condoadmin.core.tasks import ImmediateTaskRunner, TaskRunner
from condoadmin.core.validation import Validator, run_validator


DraftT = TypeVar("DraftT")
RecordT = TypeVar("RecordT")


class WorkflowMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class WorkflowState(str, Enum):
    CLOSED = "closed"
    EDITING = "editing"
    CONFIRMING = "confirming"
    SAVING = "saving"


class EntityService(Protocol[DraftT, RecordT]):
    def create(self, data: DraftT) -> RecordT:
        raise NotImplementedError

    def update(self, record_id: Any, data: DraftT) -> RecordT:
        raise NotImplementedError

    def delete(self, record_id: Any) -> None:
        raise NotImplementedError

    def list(self) -> Sequence[RecordT]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class WorkflowResult(Generic[RecordT]):
    mode: WorkflowMode
    record: RecordT | None = None
    error: str | None = None
    validation: bool = False

    @property
    def ok(self) -> bool:
        return self.record is not None and self.error is None


WorkflowListener = Callable[["EditWorkflow[Any, Any]"], None]
ResultListener = Callable[[WorkflowResult[Any]], None]


def _default_identity(draft: Any) -> Hashable:
    if isinstance(draft, Mapping):
        return draft.get("id")
    return getattr(draft, "id")


def merge_patch(draft: DraftT, patch: Mapping[str, Any]) -> DraftT:
    if not patch:
        return draft
    if dataclasses.is_dataclass(draft) and not isinstance(draft, type):
        return dataclasses.replace(draft, **dict(patch))
    if isinstance(draft, Mapping):
        merged = dict(draft)
        merged.update(patch)
        return merged  # type: ignore[return-value]
    raise TypeError(f"Cannot patch draft of type {type(draft).__name__}")


class EditWorkflow(Generic[DraftT, RecordT]):
    """Controls one create/edit dialog: draft, validation, confirmation, save.

    The owner (the list view) opens the workflow with an initial record,
    forwards field edits through ``update_draft`` and calls ``submit``. Every
    submit re-validates the current draft; a failing draft never reaches the
    service. With ``require_confirmation`` the save runs only after the
    confirmation gate is confirmed. Results are reported once per submit
    attempt through ``on_result``; service failures are turned into a display
    string and never propagate.

    Closing the workflow while a save is in flight makes that save stale: its
    eventual success or failure is ignored.
    """

    def __init__(
        self,
        service: EntityService[DraftT, RecordT],
        *,
        validator: Validator[DraftT] | None = None,
        require_confirmation: bool = False,
        gate: ConfirmationGate | None = None,
        runner: TaskRunner | None = None,
        identity: Callable[[DraftT], Hashable] | None = None,
        on_result: ResultListener | None = None,
        confirm_title: str = "Confirmar alterações",
        confirm_message: str = "Deseja salvar as alterações?",
        confirm_text: str = "Salvar",
        name: str = "registro",
        logger: logging.Logger | None = None,
    ) -> None:
        self._service = service
        self._validator = validator
        self.require_confirmation = bool(require_confirmation)
        self._runner: TaskRunner = runner or ImmediateTaskRunner()
        self._gate = gate or ConfirmationGate(runner=self._runner, logger=logger)
        self._identity = identity or _default_identity
        self._on_result = on_result
        self.confirm_title = confirm_title
        self.confirm_message = confirm_message
        self.confirm_text = confirm_text
        self.name = name
        self._logger = logger or logging.getLogger("condoadmin.workflow")

        self._state = WorkflowState.CLOSED
        self._mode = WorkflowMode.CREATE
        self._draft: DraftT | None = None
        self._error: str | None = None
        self._generation = 0
        self._listeners: list[WorkflowListener] = []
        self._gate.subscribe(self._on_gate_changed)

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def mode(self) -> WorkflowMode:
        return self._mode

    @property
    def draft(self) -> DraftT | None:
        return self._draft

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def gate(self) -> ConfirmationGate:
        return self._gate

    @property
    def generation(self) -> int:
        """Bumped by every open and close; a new value means a fresh draft."""
        return self._generation

    @property
    def is_open(self) -> bool:
        return self._state is not WorkflowState.CLOSED

    @property
    def busy(self) -> bool:
        if self._state is WorkflowState.SAVING:
            return True
        return self._state is WorkflowState.CONFIRMING and self._gate.busy

    def subscribe(self, callback: WorkflowListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                return

        return _unsubscribe

    def set_result_listener(self, callback: ResultListener | None) -> None:
        self._on_result = callback

    def open(self, initial_data: DraftT, mode: WorkflowMode = WorkflowMode.CREATE) -> None:
        self._gate.close()
        self._generation += 1
        self._mode = WorkflowMode(mode)
        self._draft = copy.deepcopy(initial_data)
        self._error = None
        self._state = WorkflowState.EDITING
        self._logger.debug("Opened %s workflow (%s)", self.name, self._mode.value)
        self._notify()

    def update_draft(self, patch: Mapping[str, Any] | None = None, /, **fields: Any) -> None:
        if self._state is not WorkflowState.EDITING or self._draft is None:
            return
        changes: dict[str, Any] = dict(patch or {})
        changes.update(fields)
        if not changes:
            return
        self._draft = merge_patch(self._draft, changes)
        self._notify()

    def submit(self) -> bool:
        if self._state is not WorkflowState.EDITING or self._draft is None:
            return False

        message = run_validator(self._validator, self._draft)
        if message is not None:
            self._error = message
            self._logger.debug("Validation failed for %s: %s", self.name, message)
            self._notify()
            self._emit(WorkflowResult(mode=self._mode, error=message, validation=True))
            return False

        self._error = None
        snapshot = copy.deepcopy(self._draft)
        mode = self._mode
        generation = self._generation

        if not self.require_confirmation:
            self._start_save(snapshot, mode, generation)
            return True

        self._state = WorkflowState.CONFIRMING
        self._notify()
        self._gate.request(
            lambda: self._persist(snapshot, mode),
            title=self.confirm_title,
            message=self.confirm_message,
            confirm_text=self.confirm_text,
            on_success=lambda record: self._saved(generation, mode, record),
            on_error=lambda exc: self._failed(generation, mode, exc, keep_state=True),
            on_cancel=lambda: self._confirmation_cancelled(generation),
        )
        return True

    def cancel(self) -> bool:
        if not self.is_open or self.busy:
            return False
        self.close()
        return True

    def close(self) -> None:
        was_open = self.is_open
        if self._state is WorkflowState.SAVING or self._gate.busy:
            self._logger.info("Closing %s workflow with a save in flight; result will be ignored", self.name)
        self._gate.close()
        self._generation += 1
        self._state = WorkflowState.CLOSED
        self._draft = None
        self._error = None
        if was_open:
            self._notify()

    def _start_save(self, snapshot: DraftT, mode: WorkflowMode, generation: int) -> None:
        self._state = WorkflowState.SAVING
        self._notify()
        self._runner.submit(
            lambda: self._persist(snapshot, mode),
            on_success=lambda record: self._saved(generation, mode, record),
            on_error=lambda exc: self._failed(generation, mode, exc, keep_state=False),
        )

    def _persist(self, draft: DraftT, mode: WorkflowMode) -> RecordT:
        if mode is WorkflowMode.EDIT:
            return self._service.update(self._identity(draft), draft)
        return self._service.create(draft)

    def _saved(self, generation: int, mode: WorkflowMode, record: RecordT) -> None:
        if generation != self._generation:
            self._logger.debug("Ignoring stale %s save result", self.name)
            return
        self._gate.close()
        self._generation += 1
        self._state = WorkflowState.CLOSED
        self._draft = None
        self._error = None
        self._logger.info("Saved %s (%s)", self.name, mode.value)
        self._notify()
        self._emit(WorkflowResult(mode=mode, record=record))

    def _failed(
        self,
        generation: int,
        mode: WorkflowMode,
        exc: BaseException,
        *,
        keep_state: bool,
    ) -> None:
        if generation != self._generation:
            self._logger.debug("Ignoring stale %s save failure: %s", self.name, exc)
            return
        message = error_message(exc)
        self._error = message
        if not keep_state:
            self._state = WorkflowState.EDITING
        self._logger.warning("Saving %s failed: %s", self.name, message)
        self._notify()
        self._emit(WorkflowResult(mode=mode, error=message))

    def _confirmation_cancelled(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._state = WorkflowState.EDITING
        self._error = None
        self._notify()

    def _on_gate_changed(self, _gate: ConfirmationGate) -> None:
        # Busy flips while the gate runs the save.
        if self._state is WorkflowState.CONFIRMING:
            self._notify()

    def _emit(self, result: WorkflowResult[RecordT]) -> None:
        if self._on_result is not None:
            self._on_result(result)

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self)
