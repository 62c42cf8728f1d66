import pytest

from condoadmin.app.models import UsuarioDraft
from condoadmin.app.supabase_client import SupabaseRequestError
from condoadmin.core import (
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
    UnknownError,
    ValidationError,
)

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, MEMBER_EMAIL, MEMBER_PASSWORD


def _new_user(**overrides):
    values = {
        "nome": "Carla Síndica",
        "email": "carla@condo.com",
        "senha": "segredo",
        "telefone": "(41) 98888-7777",
        "tipo_acesso": "usuario",
    }
    values.update(overrides)
    return UsuarioDraft(**values)


class TestExecutor:
    def test_current_executor_resolves_profile(self, usuario_service):
        executor = usuario_service.current_executor()

        assert executor.nome == "Ana Admin"
        assert executor.is_admin

    def test_missing_session_is_unauthorized(self, backend, usuario_service):
        backend.set_session(None)

        with pytest.raises(UnauthorizedError, match="Usuário não autenticado."):
            usuario_service.current_executor()

    def test_session_without_profile(self, backend, usuario_service):
        backend.add_auth_user("sem.perfil@condo.com", "qualquer")
        backend.login_as("sem.perfil@condo.com")

        with pytest.raises(UnauthorizedError) as info:
            usuario_service.current_executor()

        assert info.value.code == "PROFILE_NOT_FOUND"

    def test_access_type_defaults_to_usuario_on_failure(self, backend, usuario_service):
        backend.set_session(None)

        assert usuario_service.current_access_type() == "usuario"

    def test_member_is_not_admin(self, backend, usuario_service):
        backend.login_as(MEMBER_EMAIL)

        with pytest.raises(UnauthorizedError) as info:
            usuario_service.require_admin()

        assert info.value.code == "FORBIDDEN"


class TestQueries:
    def test_list_is_ordered_by_nome(self, usuario_service):
        assert [user.nome for user in usuario_service.list()] == ["Ana Admin", "Bruno Morador"]

    def test_search_by_nome(self, usuario_service):
        assert [user.id for user in usuario_service.search_by_nome("bruno")] == [2]

    def test_get_by_id(self, usuario_service):
        assert usuario_service.get_by_id(2).email == MEMBER_EMAIL
        assert usuario_service.get_by_id(50) is None


class TestCreate:
    def test_create_signs_up_and_inserts_profile(self, backend, usuario_service):
        created = usuario_service.create(_new_user())

        assert created.nome == "Carla Síndica"
        assert created.telefone == "41988887777"
        row = backend.calls_to("insert")[0][2]["row"]
        assert row["id_authentication"] == backend.auth_users["carla@condo.com"]["user"].id
        assert "senha" not in row
        assert "senha_atual" not in row
        assert "id" not in row

    def test_member_cannot_create(self, backend, usuario_service):
        backend.login_as(MEMBER_EMAIL)

        with pytest.raises(UnauthorizedError):
            usuario_service.create(_new_user())

        assert backend.calls_to("sign_up") == []

    def test_short_password(self, usuario_service):
        with pytest.raises(ValidationError, match="Senha curta"):
            usuario_service.create(_new_user(senha="123"))

    def test_existing_email_is_duplicate(self, backend, usuario_service):
        with pytest.raises(DuplicateError, match="Email já cadastrado"):
            usuario_service.create(_new_user(email=MEMBER_EMAIL))

        assert backend.calls_to("insert") == []


class TestUpdate:
    def test_update_patches_only_changed_fields(self, backend, usuario_service):
        draft = usuario_service.get_by_id(2).to_draft()
        draft.nome = "Bruno Silva"

        updated = usuario_service.update(2, draft)

        assert updated.nome == "Bruno Silva"
        assert backend.calls_to("update")[0][2]["values"] == {"nome": "Bruno Silva"}
        assert backend.calls_to("verify_password") == []

    def test_unchanged_draft_skips_backend_write(self, backend, usuario_service):
        draft = usuario_service.get_by_id(2).to_draft()

        usuario_service.update(2, draft)

        assert backend.calls_to("update") == []

    def test_email_cannot_change(self, usuario_service):
        draft = usuario_service.get_by_id(2).to_draft()
        draft.email = "outro@condo.com"

        with pytest.raises(ValidationError, match="Email não pode ser alterado"):
            usuario_service.update(2, draft)

    def test_missing_target(self, usuario_service):
        with pytest.raises(NotFoundError, match="Usuário não encontrado"):
            usuario_service.update(99, {"nome": "X"})

    def test_password_change_requires_current_password(self, backend, usuario_service):
        with pytest.raises(ValidationError, match="Senha atual é obrigatória para alterar a senha"):
            usuario_service.update(2, {"senha": "novasenha"})

        assert backend.calls_to("verify_password") == []

    def test_wrong_current_password(self, backend, usuario_service):
        with pytest.raises(ValidationError, match="Senha atual incorreta"):
            usuario_service.update(2, {"senha": "novasenha", "senhaAtual": "errada"})

        assert backend.calls_to("update_user") == []

    def test_password_change_uses_verified_session(self, backend, usuario_service):
        usuario_service.update(2, {"senha": "novasenha", "senha_atual": MEMBER_PASSWORD})

        call = backend.calls_to("update_user")[0][2]
        assert call["access_token"] == f"verified-{MEMBER_EMAIL}"
        assert backend.auth_users[MEMBER_EMAIL]["password"] == "novasenha"
        assert backend.session.user.email == ADMIN_EMAIL

    def test_password_update_failure(self, backend, usuario_service):
        backend.fail_on("update_user", SupabaseRequestError("weak password", status=422, code="weak_password"))

        with pytest.raises(UnknownError, match="Erro ao atualizar senha"):
            usuario_service.update(1, {"senha": "novasenha", "senha_atual": ADMIN_PASSWORD})


def test_delete_requires_admin(backend, usuario_service):
    backend.login_as(MEMBER_EMAIL)

    with pytest.raises(UnauthorizedError):
        usuario_service.delete(1)

    assert backend.calls_to("delete") == []


def test_delete_removes_profile(backend, usuario_service):
    usuario_service.delete(2)

    assert [row["id"] for row in backend.tables["usuarios"]] == [1]
