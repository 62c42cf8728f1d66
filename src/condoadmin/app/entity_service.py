from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar

from condoadmin.app.db_debug import db_debug
from condoadmin.app.supabase_client import Filter, SupabaseClient, SupabaseRequestError
from condoadmin.core.errors import (
    DuplicateError,
    EntityServiceError,
    ForeignKeyViolation,
    NotFoundError,
    UnknownError,
)


ResultT = TypeVar("ResultT")

NOT_FOUND_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"
FOREIGN_KEY_VIOLATION_CODE = "23503"


class SupabaseEntityService:
    """Shared plumbing for services backed by one PostgREST table.

    Subclasses set ``table`` and the entity-specific messages. Every backend
    call goes through ``_call`` so failures reach callers as
    ``EntityServiceError`` subclasses and are logged once.
    """

    table = ""
    not_found_message = "Registro não encontrado"
    duplicate_message = "Já existe um registro com esses dados"
    foreign_key_message = "Não é possível excluir: existem registros relacionados"

    def __init__(
        self,
        client: SupabaseClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger("condoadmin.services")

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _call(self, operation: str, job: Callable[[], ResultT]) -> ResultT:
        try:
            return job()
        except EntityServiceError:
            raise
        except SupabaseRequestError as exc:
            error = self._map_error(exc, operation)
            self._logger.error("[%s] Falha ao %s: %s (%s)", self.table, operation, exc.message, exc.code or exc.status)
            db_debug(
                "service.error",
                table=self.table,
                operation=operation,
                status=exc.status,
                code=exc.code,
                mapped=error.code,
            )
            raise error from exc

    def _map_error(self, exc: SupabaseRequestError, operation: str) -> EntityServiceError:
        if exc.transport_failure:
            return UnknownError(f"Erro inesperado ao {operation}", details=exc.message)
        if exc.code == NOT_FOUND_CODE:
            return NotFoundError(self.not_found_message, details=exc.details)
        if exc.code == UNIQUE_VIOLATION_CODE:
            return DuplicateError(self.duplicate_message, details=exc.details)
        if exc.code == FOREIGN_KEY_VIOLATION_CODE:
            return ForeignKeyViolation(self.foreign_key_message, details=exc.details)
        return UnknownError(
            exc.message or f"Erro ao {operation}",
            code=exc.code or None,
            details=exc.details,
        )

    def _select_rows(
        self,
        operation: str,
        *,
        filters: Sequence[Filter] = (),
        order: str | None = None,
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        rows = self._call(
            operation,
            lambda: self._client.select(
                self.table,
                filters=filters,
                order=order,
                ascending=ascending,
            ),
        )
        if not isinstance(rows, list):
            return []
        return [row for row in rows if isinstance(row, dict)]

    def _select_one(self, operation: str, *, filters: Sequence[Filter]) -> dict[str, Any] | None:
        """Fetch exactly one row; a missing row is ``None``, not an error."""
        try:
            row = self._call(
                operation,
                lambda: self._client.select(self.table, filters=filters, single=True),
            )
        except NotFoundError:
            return None
        if not isinstance(row, dict):
            return None
        return row

    def _insert_one(self, operation: str, row: dict[str, Any]) -> dict[str, Any]:
        created = self._call(operation, lambda: self._client.insert(self.table, row))
        if not isinstance(created, dict):
            raise UnknownError(f"Erro ao {operation}")
        return created

    def _update_one(self, operation: str, record_id: Any, values: dict[str, Any]) -> dict[str, Any]:
        updated = self._call(
            operation,
            lambda: self._client.update(self.table, values, filters=[("id", "eq", record_id)]),
        )
        if not isinstance(updated, dict):
            raise UnknownError(f"Erro ao {operation}")
        return updated

    def _delete_one(self, operation: str, record_id: Any) -> None:
        self._call(
            operation,
            lambda: self._client.delete(self.table, filters=[("id", "eq", record_id)]),
        )
