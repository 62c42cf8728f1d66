from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from condoadmin.app.entity_service import SupabaseEntityService
from condoadmin.app.models import (
    DEFAULT_ACCESS_TYPE,
    DEFAULT_ADMINISTRADORA_ID,
    Usuario,
    UsuarioDraft,
    clean_phone,
    normalize_access_type,
)
from condoadmin.app.supabase_client import SupabaseRequestError
from condoadmin.core.errors import (
    DuplicateError,
    EntityServiceError,
    NotFoundError,
    UnauthorizedError,
    UnknownError,
    ValidationError,
)


TABLE_NAME = "usuarios"
MIN_PASSWORD_LENGTH = 6

_PROFILE_FIELDS = ("nome", "email", "telefone", "id_administradora", "tipo_acesso")
_ALREADY_REGISTERED = {"user already registered", "user_already_exists", "email_exists"}


def _fields_from(data: UsuarioDraft | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, Mapping):
        source = dict(data)
        # Also accept camelCase ``senhaAtual``.
        if "senhaAtual" in source and "senha_atual" not in source:
            source["senha_atual"] = source.pop("senhaAtual")
        return source
    if dataclasses.is_dataclass(data):
        return dataclasses.asdict(data)
    raise TypeError(f"Unsupported usuario payload: {type(data).__name__}")


def _profile_values(fields: Mapping[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key in _PROFILE_FIELDS:
        if key not in fields:
            continue
        raw = fields[key]
        if key == "telefone":
            values[key] = clean_phone(raw)
        elif key == "tipo_acesso":
            values[key] = normalize_access_type(raw)
        elif key == "id_administradora":
            values[key] = int(raw or 0)
        else:
            values[key] = str(raw or "").strip()
    return values


def _is_already_registered(exc: SupabaseRequestError) -> bool:
    return exc.message.strip().casefold() in _ALREADY_REGISTERED or exc.code in _ALREADY_REGISTERED


class UsuarioService(SupabaseEntityService):
    """User profiles in ``usuarios`` plus their Supabase auth accounts.

    Every mutation requires the logged-in account to be an admin. The password
    lives only in auth; it is never written to the profile table.
    """

    table = TABLE_NAME
    not_found_message = "Usuário não encontrado"
    duplicate_message = "Já existe um usuário com esses dados"

    def current_executor(self) -> Usuario:
        session = self._client.session
        if session is None:
            raise UnauthorizedError("Usuário não autenticado.")
        row = self._select_one(
            "buscar usuário logado",
            filters=[("id_authentication", "eq", session.user.id)],
        )
        if row is None:
            raise UnauthorizedError(
                "Registro de usuário não encontrado para esta conta.",
                code="PROFILE_NOT_FOUND",
            )
        return Usuario.from_mapping(row)

    def require_admin(self) -> Usuario:
        executor = self.current_executor()
        if not executor.is_admin:
            self._logger.warning("Blocked non-admin mutation by usuario %s", executor.id)
            raise UnauthorizedError("Ação não autorizada. Apenas administradores.", code="FORBIDDEN")
        return executor

    def current_access_type(self) -> str:
        try:
            return self.current_executor().tipo_acesso
        except EntityServiceError as exc:
            self._logger.info("Access type lookup failed, assuming %s: %s", DEFAULT_ACCESS_TYPE, exc.message)
            return DEFAULT_ACCESS_TYPE

    def list(self) -> list[Usuario]:
        rows = self._select_rows("buscar usuários", order="nome")
        return [Usuario.from_mapping(row) for row in rows]

    def get_by_id(self, record_id: int) -> Usuario | None:
        row = self._select_one("buscar usuário por ID", filters=[("id", "eq", record_id)])
        if row is None:
            return None
        return Usuario.from_mapping(row)

    def search_by_nome(self, nome: str) -> list[Usuario]:
        needle = str(nome or "").strip()
        rows = self._select_rows(
            "buscar usuário por nome",
            filters=[("nome", "ilike", f"*{needle}*")],
            order="nome",
        )
        return [Usuario.from_mapping(row) for row in rows]

    def create(self, data: UsuarioDraft | Mapping[str, Any]) -> Usuario:
        self.require_admin()
        fields = _fields_from(data)
        email = str(fields.get("email") or "").strip()
        senha = str(fields.get("senha") or "")
        if not email:
            raise ValidationError("Email é obrigatório")
        if len(senha) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Senha curta")
        if not str(fields.get("nome") or "").strip():
            raise ValidationError("Nome é obrigatório")

        try:
            auth_user = self._client.sign_up(email, senha)
        except SupabaseRequestError as exc:
            if _is_already_registered(exc):
                raise DuplicateError("Email já cadastrado", details=exc.details) from exc
            raise self._map_error(exc, "cadastrar usuário") from exc

        row = _profile_values(fields)
        row.setdefault("id_administradora", DEFAULT_ADMINISTRADORA_ID)
        row.setdefault("tipo_acesso", DEFAULT_ACCESS_TYPE)
        row["email"] = email
        row["id_authentication"] = auth_user.id
        created = Usuario.from_mapping(self._insert_one("criar usuário", row))
        self._logger.info("Created usuario %s for auth user %s", created.id, auth_user.id)
        return created

    def update(self, record_id: int, data: UsuarioDraft | Mapping[str, Any]) -> Usuario:
        self.require_admin()
        if not record_id:
            raise ValidationError("ID é obrigatório")
        target = self.get_by_id(record_id)
        if target is None:
            raise NotFoundError(self.not_found_message)

        fields = _fields_from(data)
        email = str(fields.get("email") or "").strip()
        if email and email.casefold() != target.email.casefold():
            raise ValidationError("Email não pode ser alterado")

        senha = str(fields.get("senha") or "")
        if senha:
            self._change_password(target, senha, str(fields.get("senha_atual") or ""))

        values = {
            key: value
            for key, value in _profile_values(fields).items()
            if key != "email" and value != getattr(target, key)
        }
        if not values:
            return target
        updated = Usuario.from_mapping(self._update_one("atualizar usuário", record_id, values))
        self._logger.info("Updated usuario %s (%s)", updated.id, ", ".join(sorted(values)))
        return updated

    def delete(self, record_id: int) -> None:
        self.require_admin()
        if not record_id:
            raise ValidationError("ID é obrigatório")
        self._delete_one("excluir usuário", record_id)
        self._logger.info("Deleted usuario %s", record_id)

    def _change_password(self, target: Usuario, senha: str, senha_atual: str) -> None:
        if not senha_atual:
            raise ValidationError("Senha atual é obrigatória para alterar a senha")
        if len(senha) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Senha deve ter no mínimo 6 caracteres")
        try:
            verified = self._client.verify_password(target.email, senha_atual)
        except SupabaseRequestError as exc:
            if exc.transport_failure:
                raise self._map_error(exc, "verificar senha atual") from exc
            raise ValidationError("Senha atual incorreta") from exc
        try:
            self._client.update_user(password=senha, access_token=verified.access_token)
        except SupabaseRequestError as exc:
            self._logger.error("Password update failed for usuario %s: %s", target.id, exc.message)
            raise UnknownError("Erro ao atualizar senha", details=exc.message) from exc
        self._logger.info("Password changed for usuario %s", target.id)
