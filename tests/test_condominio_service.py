import pytest

from condoadmin.app.condominio_service import sanitizar_dados, validar_payload
from condoadmin.app.models import CondominioDraft
from condoadmin.app.supabase_client import SupabaseRequestError
from condoadmin.core import (
    DuplicateError,
    ForeignKeyViolation,
    NotFoundError,
    UnknownError,
    ValidationError,
)


def _seed(backend, **overrides):
    row = {
        "nome_condominio": "Residencial Aurora",
        "endereco_condominio": "Rua A, 10",
        "cidade_condominio": "Curitiba",
        "uf_condominio": "PR",
        "tipo_condominio": "Vertical",
    }
    row.update(overrides)
    return backend.add_row("condominio", row)


class TestHelpers:
    def test_sanitizar_trims_and_upper_cases(self):
        values = sanitizar_dados(
            {"nome_condominio": "  Aurora ", "uf_condominio": " sp ", "endereco_condominio": "  ", "extra": 1}
        )

        assert values == {"nome_condominio": "Aurora", "uf_condominio": "SP", "endereco_condominio": None}

    def test_partial_validation_only_checks_present_fields(self):
        validar_payload({"tipo_condominio": "Casa"}, partial=True)

        with pytest.raises(ValidationError, match="UF deve ter exatamente 2 caracteres"):
            validar_payload({"uf_condominio": "Paraná"}, partial=True)


class TestQueries:
    def test_list_is_ordered_by_id(self, backend, condominio_service):
        _seed(backend, nome_condominio="B")
        _seed(backend, nome_condominio="A")

        records = condominio_service.list()

        assert [record.id for record in records] == [1, 2]
        assert backend.calls_to("select")[0][2]["order"] == "id"

    def test_get_by_id_returns_none_when_missing(self, condominio_service):
        assert condominio_service.get_by_id(99) is None

    def test_list_by_cidade_and_uf(self, backend, condominio_service):
        _seed(backend, nome_condominio="Bosque", cidade_condominio="Curitiba")
        _seed(backend, nome_condominio="Aurora", cidade_condominio="São Paulo", uf_condominio="SP")

        assert [record.nome_condominio for record in condominio_service.list_by_cidade("curi")] == ["Bosque"]
        assert [record.nome_condominio for record in condominio_service.list_by_uf("sp")] == ["Aurora"]


class TestCreate:
    def test_create_inserts_sanitised_row(self, backend, condominio_service):
        created = condominio_service.create(
            CondominioDraft(nome_condominio=" Aurora ", cidade_condominio="Curitiba", uf_condominio="pr")
        )

        assert created.id == 1
        assert created.uf_condominio == "PR"
        row = backend.calls_to("insert")[0][2]["row"]
        assert row["nome_condominio"] == "Aurora"
        assert row["endereco_condominio"] is None
        assert "id" not in row

    def test_create_rejects_invalid_payload_without_calling_backend(self, backend, condominio_service):
        with pytest.raises(ValidationError, match="Cidade é obrigatória"):
            condominio_service.create({"nome_condominio": "Aurora", "uf_condominio": "PR"})

        assert backend.calls == []

    def test_duplicate_is_mapped(self, backend, condominio_service):
        backend.fail_on("insert", SupabaseRequestError("duplicate key", status=409, code="23505"))

        with pytest.raises(DuplicateError) as info:
            condominio_service.create(
                CondominioDraft(nome_condominio="Aurora", cidade_condominio="Curitiba", uf_condominio="PR")
            )

        assert info.value.message == "Já existe um condomínio com esses dados"

    def test_transport_failure_is_unknown_error(self, backend, condominio_service):
        backend.fail_on("insert", SupabaseRequestError("Falha de conexão com o Supabase: timed out"))

        with pytest.raises(UnknownError, match="Erro inesperado ao criar condomínio"):
            condominio_service.create(
                CondominioDraft(nome_condominio="Aurora", cidade_condominio="Curitiba", uf_condominio="PR")
            )


class TestUpdate:
    def test_update_patches_row(self, backend, condominio_service):
        existing = _seed(backend)

        updated = condominio_service.update(existing["id"], {"nome_condominio": "Aurora II", "uf_condominio": "sc"})

        assert updated.nome_condominio == "Aurora II"
        assert updated.uf_condominio == "SC"
        assert backend.calls_to("update")[0][2]["values"] == {"nome_condominio": "Aurora II", "uf_condominio": "SC"}

    def test_update_requires_id(self, condominio_service):
        with pytest.raises(ValidationError, match="ID é obrigatório"):
            condominio_service.update(0, {"nome_condominio": "X"})

    def test_update_missing_record(self, backend, condominio_service):
        with pytest.raises(NotFoundError, match="Condomínio não encontrado"):
            condominio_service.update(42, {"nome_condominio": "X"})

        assert backend.calls_to("update") == []

    def test_update_with_nothing_to_change_returns_existing(self, backend, condominio_service):
        existing = _seed(backend)

        record = condominio_service.update(existing["id"], {})

        assert record.nome_condominio == "Residencial Aurora"
        assert backend.calls_to("update") == []


class TestDelete:
    def test_delete_removes_row(self, backend, condominio_service):
        existing = _seed(backend)

        condominio_service.delete(existing["id"])

        assert backend.tables["condominio"] == []

    def test_delete_missing_record(self, condominio_service):
        with pytest.raises(NotFoundError):
            condominio_service.delete(5)

    def test_delete_with_dependents_is_foreign_key_violation(self, backend, condominio_service):
        existing = _seed(backend)
        backend.fail_on("delete", SupabaseRequestError("violates foreign key", status=409, code="23503"))

        with pytest.raises(ForeignKeyViolation):
            condominio_service.delete(existing["id"])

        assert len(backend.tables["condominio"]) == 1
