from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from condoadmin.app.entity_service import SupabaseEntityService
from condoadmin.app.models import Condominio, CondominioDraft, normalize_uf
from condoadmin.core.errors import NotFoundError, ValidationError


TABLE_NAME = "condominio"

_EDITABLE_FIELDS = (
    "nome_condominio",
    "endereco_condominio",
    "cidade_condominio",
    "uf_condominio",
    "tipo_condominio",
)
_OPTIONAL_FIELDS = {"endereco_condominio", "tipo_condominio"}


def _payload_from(data: CondominioDraft | Condominio | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, Mapping):
        source = dict(data)
    elif dataclasses.is_dataclass(data):
        source = dataclasses.asdict(data)
    else:
        raise TypeError(f"Unsupported condominio payload: {type(data).__name__}")
    return {key: source[key] for key in _EDITABLE_FIELDS if key in source}


def validar_payload(payload: Mapping[str, Any], *, partial: bool = False) -> None:
    """Raise ``ValidationError`` for the first invalid field.

    With ``partial`` only the fields present in ``payload`` are checked.
    """
    def _check(key: str) -> bool:
        return not partial or key in payload

    if _check("nome_condominio") and not str(payload.get("nome_condominio") or "").strip():
        raise ValidationError("Nome do condomínio é obrigatório")
    if _check("cidade_condominio") and not str(payload.get("cidade_condominio") or "").strip():
        raise ValidationError("Cidade é obrigatória")
    if _check("uf_condominio") and len(str(payload.get("uf_condominio") or "").strip()) != 2:
        raise ValidationError("UF deve ter exatamente 2 caracteres")


def sanitizar_dados(payload: Mapping[str, Any]) -> dict[str, Any]:
    sanitized: dict[str, Any] = {}
    for key in _EDITABLE_FIELDS:
        if key not in payload:
            continue
        text = str(payload.get(key) or "").strip()
        if key == "uf_condominio":
            sanitized[key] = normalize_uf(text)
        elif key in _OPTIONAL_FIELDS:
            sanitized[key] = text or None
        else:
            sanitized[key] = text
    return sanitized


class CondominioService(SupabaseEntityService):
    table = TABLE_NAME
    not_found_message = "Condomínio não encontrado"
    duplicate_message = "Já existe um condomínio com esses dados"

    def list(self) -> list[Condominio]:
        rows = self._select_rows("buscar condomínios", order="id")
        return [Condominio.from_mapping(row) for row in rows]

    def get_by_id(self, record_id: int) -> Condominio | None:
        row = self._select_one("buscar condomínio", filters=[("id", "eq", record_id)])
        if row is None:
            return None
        return Condominio.from_mapping(row)

    def list_by_cidade(self, cidade: str) -> list[Condominio]:
        needle = str(cidade or "").strip()
        rows = self._select_rows(
            "buscar condomínios por cidade",
            filters=[("cidade_condominio", "ilike", f"*{needle}*")],
            order="nome_condominio",
        )
        return [Condominio.from_mapping(row) for row in rows]

    def list_by_uf(self, uf: str) -> list[Condominio]:
        rows = self._select_rows(
            "buscar condomínios por UF",
            filters=[("uf_condominio", "eq", normalize_uf(uf))],
            order="nome_condominio",
        )
        return [Condominio.from_mapping(row) for row in rows]

    def create(self, data: CondominioDraft | Mapping[str, Any]) -> Condominio:
        payload = _payload_from(data)
        validar_payload(payload)
        row = self._insert_one("criar condomínio", sanitizar_dados(payload))
        created = Condominio.from_mapping(row)
        self._logger.info("Created condominio %s", created.id)
        return created

    def update(self, record_id: int, data: CondominioDraft | Mapping[str, Any]) -> Condominio:
        if not record_id:
            raise ValidationError("ID é obrigatório")
        payload = _payload_from(data)
        validar_payload(payload, partial=True)

        existing = self.get_by_id(record_id)
        if existing is None:
            raise NotFoundError(self.not_found_message)

        values = sanitizar_dados(payload)
        if not values:
            return existing
        row = self._update_one("atualizar condomínio", record_id, values)
        updated = Condominio.from_mapping(row)
        self._logger.info("Updated condominio %s", updated.id)
        return updated

    def delete(self, record_id: int) -> None:
        if not record_id:
            raise ValidationError("ID é obrigatório")
        if self.get_by_id(record_id) is None:
            raise NotFoundError(self.not_found_message)
        self._delete_one("excluir condomínio", record_id)
        self._logger.info("Deleted condominio %s", record_id)
