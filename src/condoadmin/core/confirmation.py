from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from condoadmin.core.errors import error_message
from condoadmin.core.tasks import ImmediateTaskRunner, TaskRunner


GateListener = Callable[["ConfirmationGate"], None]


@dataclass(frozen=True, slots=True)
class PendingAction:
    """The captured intent held while a confirmation prompt is open."""

    on_confirm: Callable[[], Any]
    title: str
    message: str
    confirm_text: str = "Confirmar"
    cancel_text: str = "Cancelar"
    danger: bool = False
    on_success: Callable[[Any], None] | None = None
    on_error: Callable[[BaseException], None] | None = None
    on_cancel: Callable[[], None] | None = None


class ConfirmationGate:
    """Yes/no prompt that runs a committing action only after confirmation.

    The gate never blocks a thread: ``request`` opens it, and the view calls
    ``confirm`` or ``cancel`` later. While the action runs the gate is busy and
    ignores both triggers. A failing action leaves the gate open with the
    failure message so the user can retry or cancel; a successful one closes
    it. ``close`` is a forced dismissal whose late results are discarded.
    """

    def __init__(
        self,
        *,
        runner: TaskRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner: TaskRunner = runner or ImmediateTaskRunner()
        self._logger = logger or logging.getLogger("condoadmin.workflow")
        self._pending: PendingAction | None = None
        self._busy = False
        self._error: str | None = None
        self._generation = 0
        self._listeners: list[GateListener] = []

    @property
    def is_open(self) -> bool:
        return self._pending is not None

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def pending(self) -> PendingAction | None:
        return self._pending

    def subscribe(self, callback: GateListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                return

        return _unsubscribe

    def request(
        self,
        on_confirm: Callable[[], Any],
        *,
        title: str = "Confirmar",
        message: str = "",
        confirm_text: str = "Confirmar",
        cancel_text: str = "Cancelar",
        danger: bool = False,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> bool:
        if self._pending is not None:
            self._logger.debug("Confirmation already open; ignoring request for %r", title)
            return False
        self._generation += 1
        self._pending = PendingAction(
            on_confirm=on_confirm,
            title=title,
            message=message,
            confirm_text=confirm_text,
            cancel_text=cancel_text,
            danger=danger,
            on_success=on_success,
            on_error=on_error,
            on_cancel=on_cancel,
        )
        self._busy = False
        self._error = None
        self._notify()
        return True

    def confirm(self) -> bool:
        pending = self._pending
        if pending is None or self._busy:
            return False
        self._busy = True
        self._error = None
        generation = self._generation
        self._notify()
        self._runner.submit(
            pending.on_confirm,
            on_success=lambda result: self._finish(generation, result),
            on_error=lambda exc: self._fail(generation, exc),
        )
        return True

    def cancel(self) -> bool:
        pending = self._pending
        if pending is None or self._busy:
            return False
        self._reset()
        self._notify()
        if pending.on_cancel is not None:
            pending.on_cancel()
        return True

    def close(self) -> None:
        if self._pending is None:
            return
        self._reset()
        self._notify()

    def _finish(self, generation: int, result: Any) -> None:
        if generation != self._generation or self._pending is None:
            self._logger.debug("Dropping stale confirmation result")
            return
        pending = self._pending
        self._reset()
        self._notify()
        if pending.on_success is not None:
            pending.on_success(result)

    def _fail(self, generation: int, exc: BaseException) -> None:
        if generation != self._generation or self._pending is None:
            self._logger.debug("Dropping stale confirmation failure: %s", exc)
            return
        pending = self._pending
        self._busy = False
        self._error = error_message(exc)
        self._logger.warning("Confirmed action %r failed: %s", pending.title, self._error)
        self._notify()
        if pending.on_error is not None:
            pending.on_error(exc)

    def _reset(self) -> None:
        self._generation += 1
        self._pending = None
        self._busy = False
        self._error = None

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self)
