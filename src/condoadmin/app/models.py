from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


ACCESS_TYPES: tuple[str, ...] = ("admin", "usuario")
ACCESS_TYPE_LABELS: dict[str, str] = {
    "admin": "Admin",
    "usuario": "Usuário",
}
DEFAULT_ACCESS_TYPE = "usuario"
DEFAULT_ADMINISTRADORA_ID = 1

_NON_DIGIT_PATTERN = re.compile(r"\D")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _as_optional_text(value: Any) -> str | None:
    text = _as_text(value)
    return text or None


def _as_int(value: Any, *, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_uf(value: Any) -> str:
    return _as_text(value).upper()


def normalize_access_type(value: Any) -> str:
    normalized = _as_text(value).casefold()
    if normalized in ACCESS_TYPES:
        return normalized
    return DEFAULT_ACCESS_TYPE


def access_type_label(value: Any) -> str:
    return ACCESS_TYPE_LABELS[normalize_access_type(value)]


def clean_phone(value: Any) -> str | None:
    """Strip a phone mask down to digits; empty results become None."""
    if not value:
        return None
    digits = _NON_DIGIT_PATTERN.sub("", str(value))
    return digits or None


def format_phone(value: Any) -> str:
    text = _as_text(value)
    digits = _NON_DIGIT_PATTERN.sub("", text)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return text


@dataclass(slots=True)
class Condominio:
    id: int
    nome_condominio: str
    cidade_condominio: str
    uf_condominio: str
    endereco_condominio: str | None = None
    tipo_condominio: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "Condominio":
        if not isinstance(value, Mapping):
            return cls(id=0, nome_condominio="", cidade_condominio="", uf_condominio="")
        return cls(
            id=_as_int(value.get("id") or value.get("id_condominio")),
            nome_condominio=_as_text(value.get("nome_condominio")),
            cidade_condominio=_as_text(value.get("cidade_condominio")),
            uf_condominio=normalize_uf(value.get("uf_condominio")),
            endereco_condominio=_as_optional_text(value.get("endereco_condominio")),
            tipo_condominio=_as_optional_text(value.get("tipo_condominio")),
            created_at=_as_text(value.get("created_at")),
            updated_at=_as_text(value.get("updated_at")),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nome_condominio": self.nome_condominio,
            "endereco_condominio": self.endereco_condominio,
            "cidade_condominio": self.cidade_condominio,
            "uf_condominio": self.uf_condominio,
            "tipo_condominio": self.tipo_condominio,
        }

    def to_draft(self) -> "CondominioDraft":
        return CondominioDraft(
            id=self.id,
            nome_condominio=self.nome_condominio,
            endereco_condominio=self.endereco_condominio or "",
            cidade_condominio=self.cidade_condominio,
            uf_condominio=self.uf_condominio,
            tipo_condominio=self.tipo_condominio or "",
        )


@dataclass(slots=True)
class CondominioDraft:
    id: int = 0
    nome_condominio: str = ""
    endereco_condominio: str = ""
    cidade_condominio: str = ""
    uf_condominio: str = ""
    tipo_condominio: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "nome_condominio": self.nome_condominio,
            "endereco_condominio": self.endereco_condominio,
            "cidade_condominio": self.cidade_condominio,
            "uf_condominio": self.uf_condominio,
            "tipo_condominio": self.tipo_condominio,
        }


@dataclass(slots=True)
class Usuario:
    id: int
    nome: str
    email: str
    id_administradora: int = DEFAULT_ADMINISTRADORA_ID
    id_authentication: str = ""
    tipo_acesso: str = DEFAULT_ACCESS_TYPE
    telefone: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_admin(self) -> bool:
        return self.tipo_acesso == "admin"

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "Usuario":
        if not isinstance(value, Mapping):
            return cls(id=0, nome="", email="")
        return cls(
            id=_as_int(value.get("id")),
            nome=_as_text(value.get("nome")),
            email=_as_text(value.get("email")),
            id_administradora=_as_int(value.get("id_administradora"), default=0),
            id_authentication=_as_text(value.get("id_authentication")),
            tipo_acesso=normalize_access_type(value.get("tipo_acesso")),
            telefone=clean_phone(value.get("telefone")),
            created_at=_as_text(value.get("created_at")),
            updated_at=_as_text(value.get("updated_at")),
        )

    def to_draft(self) -> "UsuarioDraft":
        return UsuarioDraft(
            id=self.id,
            nome=self.nome,
            email=self.email,
            telefone=self.telefone or "",
            id_administradora=self.id_administradora,
            tipo_acesso=self.tipo_acesso,
        )


@dataclass(slots=True)
class UsuarioDraft:
    id: int = 0
    nome: str = ""
    email: str = ""
    telefone: str = ""
    id_administradora: int = DEFAULT_ADMINISTRADORA_ID
    tipo_acesso: str = DEFAULT_ACCESS_TYPE
    senha: str = ""
    senha_atual: str = ""

    @property
    def editing(self) -> bool:
        return self.id > 0
