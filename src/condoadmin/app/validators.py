from __future__ import annotations

from condoadmin.app.models import CondominioDraft, UsuarioDraft, clean_phone
from condoadmin.core.validation import first_error


MIN_PASSWORD_LENGTH = 6
UF_LENGTH = 2


def _blank(value: object) -> bool:
    return not str(value or "").strip()


def validate_condominio(draft: CondominioDraft) -> str | None:
    return first_error(
        (_blank(draft.nome_condominio), "Nome do condomínio é obrigatório"),
        (_blank(draft.cidade_condominio), "Cidade é obrigatória"),
        (
            len(str(draft.uf_condominio or "").strip()) != UF_LENGTH,
            "UF deve ter exatamente 2 caracteres",
        ),
    )


def validate_usuario(draft: UsuarioDraft) -> str | None:
    """Rules for the user form; drafts with an id are edits."""
    editing = draft.editing
    senha = str(draft.senha or "")
    phone_digits = clean_phone(draft.telefone) or ""
    return first_error(
        (
            editing and not _blank(senha) and _blank(draft.senha_atual),
            "Senha atual é obrigatória para alterar a senha",
        ),
        (_blank(draft.nome), "Nome é obrigatório"),
        (_blank(draft.email), "Email é obrigatório"),
        (not editing and _blank(senha), "Senha é obrigatória"),
        (bool(senha) and len(senha) < MIN_PASSWORD_LENGTH, "Senha deve ter no mínimo 6 caracteres"),
        (not draft.id_administradora, "ID Administradora é obrigatório"),
        (0 < len(phone_digits) < 10, "Telefone incompleto"),
    )
