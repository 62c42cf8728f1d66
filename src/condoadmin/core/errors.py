from __future__ import annotations

from typing import Any


class EntityServiceError(Exception):
    """Base class for failures raised by an entity service."""

    default_code = "UNKNOWN"

    def __init__(
        self,
        message: str = "",
        *,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        detail = str(message or "").strip() or "Erro inesperado"
        super().__init__(detail)
        self.message = detail
        self.code = str(code or self.default_code)
        self.details = details


class ValidationError(EntityServiceError):
    default_code = "VALIDATION_ERROR"


class NotFoundError(EntityServiceError):
    default_code = "NOT_FOUND"


class DuplicateError(EntityServiceError):
    default_code = "DUPLICATE"


class ForeignKeyViolation(EntityServiceError):
    default_code = "FOREIGN_KEY_VIOLATION"


class UnauthorizedError(EntityServiceError):
    default_code = "UNAUTHORIZED"


class UnknownError(EntityServiceError):
    default_code = "UNKNOWN"


def error_message(exc: BaseException, *, fallback: str = "Erro inesperado") -> str:
    if isinstance(exc, EntityServiceError):
        return exc.message
    text = str(exc or "").strip()
    return text or fallback
