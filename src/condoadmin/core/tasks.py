from __future__ import annotations

from typing import Any, Callable, Protocol


SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class TaskRunner(Protocol):
    def submit(
        self,
        job: Callable[[], Any],
        *,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        raise NotImplementedError


class ImmediateTaskRunner:
    """Runs jobs inline on the calling thread."""

    def submit(
        self,
        job: Callable[[], Any],
        *,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            result = job()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)
