import pytest

from condoadmin.app.models import (
    Condominio,
    Usuario,
    access_type_label,
    clean_phone,
    format_phone,
    normalize_access_type,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("(41) 99999-8888", "41999998888"),
        ("41 3333 4444", "4133334444"),
        ("", None),
        (None, None),
        ("(__) _____-____", None),
    ],
)
def test_clean_phone(raw, expected):
    assert clean_phone(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("41999998888", "(41) 99999-8888"),
        ("4133334444", "(41) 3333-4444"),
        ("123", "123"),
        (None, ""),
    ],
)
def test_format_phone(raw, expected):
    assert format_phone(raw) == expected


def test_access_type_falls_back_to_usuario():
    assert normalize_access_type("ADMIN") == "admin"
    assert normalize_access_type("gerente") == "usuario"
    assert access_type_label(None) == "Usuário"


def test_condominio_from_row():
    record = Condominio.from_mapping(
        {
            "id": "5",
            "nome_condominio": " Aurora ",
            "cidade_condominio": "Curitiba",
            "uf_condominio": "pr",
            "endereco_condominio": "",
            "tipo_condominio": None,
        }
    )

    assert record.id == 5
    assert record.nome_condominio == "Aurora"
    assert record.uf_condominio == "PR"
    assert record.endereco_condominio is None
    assert record.to_draft().endereco_condominio == ""


def test_usuario_from_row_and_draft():
    record = Usuario.from_mapping(
        {
            "id": 3,
            "nome": "Carla",
            "email": "carla@condo.com",
            "telefone": "(41) 99999-8888",
            "id_administradora": "1",
            "tipo_acesso": "admin",
        }
    )

    assert record.is_admin
    assert record.telefone == "41999998888"
    draft = record.to_draft()
    assert draft.editing
    assert draft.senha == ""
    assert draft.id_administradora == 1


def test_from_mapping_tolerates_missing_row():
    assert Condominio.from_mapping(None).id == 0
    assert Usuario.from_mapping(None).nome == ""
