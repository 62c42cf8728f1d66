from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QThread, Signal, Slot

from condoadmin.core.tasks import ErrorCallback, SuccessCallback


class _TaskWorker(QObject):
    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, job: Callable[[], Any]) -> None:
        super().__init__()
        self._job = job

    @Slot()
    def run(self) -> None:
        try:
            result = self._job()
        except Exception as exc:
            self.failed.emit(exc)
            return
        self.finished.emit(result)


class _TaskHandle(QObject):
    """UI-thread end of one task; queued worker signals land here."""

    def __init__(
        self,
        runner: "QtTaskRunner",
        worker: _TaskWorker,
        thread: QThread,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        super().__init__(runner)
        self._runner = runner
        self._worker = worker
        self._thread = thread
        self._on_success = on_success
        self._on_error = on_error

    @Slot(object)
    def deliver_result(self, result: object) -> None:
        self._finish()
        self._invoke(self._on_success, result)

    @Slot(object)
    def deliver_error(self, error: object) -> None:
        self._finish()
        if not isinstance(error, BaseException):
            error = RuntimeError(str(error))
        self._invoke(self._on_error, error)

    def wait(self) -> None:
        self._thread.quit()
        self._thread.wait()

    def _finish(self) -> None:
        self.wait()
        self._worker.deleteLater()
        self._thread.deleteLater()
        self._runner._release(self)
        self.deleteLater()

    def _invoke(self, callback: Callable[[Any], None], value: Any) -> None:
        try:
            callback(value)
        except Exception:
            self._runner.logger.exception("Background task callback failed")


class QtTaskRunner(QObject):
    """Runs blocking service calls on worker threads.

    Each ``submit`` gets its own ``QThread``; the outcome is delivered back to
    the thread that owns the runner through queued signals.
    """

    def __init__(self, parent: QObject | None = None, *, logger: logging.Logger | None = None) -> None:
        super().__init__(parent)
        self.logger = logger or logging.getLogger("condoadmin.tasks")
        self._handles: set[_TaskHandle] = set()

    @property
    def active_count(self) -> int:
        return len(self._handles)

    def submit(
        self,
        job: Callable[[], Any],
        *,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        thread = QThread()
        worker = _TaskWorker(job)
        worker.moveToThread(thread)
        handle = _TaskHandle(self, worker, thread, on_success, on_error)
        self._handles.add(handle)

        thread.started.connect(worker.run)
        worker.finished.connect(handle.deliver_result)
        worker.failed.connect(handle.deliver_error)
        thread.start()

    def shutdown(self) -> None:
        for handle in tuple(self._handles):
            handle.wait()
        self._handles.clear()

    def _release(self, handle: _TaskHandle) -> None:
        self._handles.discard(handle)
