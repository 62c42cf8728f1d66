import os
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.pop("CONDOADMIN_DB_DEBUG", None)
os.environ.pop("CONDOADMIN_SUPABASE_URL", None)
os.environ.pop("CONDOADMIN_SUPABASE_ANON_KEY", None)

from condoadmin.app.condominio_service import CondominioService  # noqa: E402
from condoadmin.app.supabase_client import AuthSession, AuthUser, SupabaseRequestError  # noqa: E402
from condoadmin.app.usuario_service import UsuarioService  # noqa: E402


ADMIN_EMAIL = "admin@condo.com"
ADMIN_PASSWORD = "segredo1"
MEMBER_EMAIL = "morador@condo.com"
MEMBER_PASSWORD = "morador1"


class ManualTaskRunner:
    """Queues jobs until the test decides to run them."""

    def __init__(self):
        self.pending = []

    def submit(self, job, *, on_success, on_error):
        self.pending.append((job, on_success, on_error))

    def run_next(self):
        job, on_success, on_error = self.pending.pop(0)
        try:
            result = job()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)

    def run_all(self):
        while self.pending:
            self.run_next()


def _not_found():
    return SupabaseRequestError(
        "JSON object requested, multiple (or no) rows returned",
        status=406,
        code="PGRST116",
    )


class FakeSupabase:
    """In-memory stand-in for ``SupabaseClient`` with the same call surface."""

    def __init__(self):
        self.tables = {"condominio": [], "usuarios": []}
        self.auth_users = {}
        self.session = None
        self.calls = []
        self._failures = {}
        self._next_ids = {}

    def fail_on(self, method, error):
        self._failures[method] = error

    def calls_to(self, method):
        return [call for call in self.calls if call[0] == method]

    def add_row(self, table, row):
        stored = dict(row)
        if not stored.get("id"):
            stored["id"] = self._next_id(table)
        self.tables[table].append(stored)
        return dict(stored)

    def add_auth_user(self, email, password):
        user = AuthUser(id=f"auth-{len(self.auth_users) + 1}", email=email)
        self.auth_users[email] = {"user": user, "password": password}
        return user

    def login_as(self, email):
        entry = self.auth_users[email]
        self.session = AuthSession(access_token=f"token-{email}", refresh_token="", user=entry["user"])

    def set_session(self, session):
        self.session = session

    # REST

    def select(self, table, *, columns="*", filters=(), order=None, ascending=True, single=False):
        self._record("select", table, filters=tuple(filters), order=order, single=single)
        rows = [dict(row) for row in self.tables[table] if _matches(row, filters)]
        if order:
            rows.sort(key=lambda row: (row.get(order) is None, row.get(order)), reverse=not ascending)
        if single:
            if len(rows) != 1:
                raise _not_found()
            return rows[0]
        return rows

    def insert(self, table, row, *, single=True):
        self._record("insert", table, row=dict(row))
        return self.add_row(table, row)

    def update(self, table, values, *, filters, single=True):
        self._record("update", table, values=dict(values), filters=tuple(filters))
        matched = [row for row in self.tables[table] if _matches(row, filters)]
        if not matched:
            raise _not_found()
        for row in matched:
            row.update(values)
        return dict(matched[0])

    def delete(self, table, *, filters):
        self._record("delete", table, filters=tuple(filters))
        self.tables[table] = [row for row in self.tables[table] if not _matches(row, filters)]

    # auth

    def sign_up(self, email, password):
        self._record("sign_up", "auth", email=email)
        if email in self.auth_users:
            raise SupabaseRequestError("User already registered", status=422, code="user_already_exists")
        return self.add_auth_user(email, password)

    def verify_password(self, email, password):
        self._record("verify_password", "auth", email=email)
        entry = self.auth_users.get(email)
        if entry is None or entry["password"] != password:
            raise SupabaseRequestError("Invalid login credentials", status=400, code="invalid_credentials")
        return AuthSession(access_token=f"verified-{email}", refresh_token="", user=entry["user"])

    def update_user(self, *, email=None, password=None, access_token=None):
        self._record("update_user", "auth", password=password, access_token=access_token)
        for entry in self.auth_users.values():
            if access_token == f"verified-{entry['user'].email}":
                if password:
                    entry["password"] = password
                return entry["user"]
        raise SupabaseRequestError("Invalid JWT", status=401, code="bad_jwt")

    def _record(self, method, table, **details):
        self.calls.append((method, table, details))
        error = self._failures.pop(method, None)
        if error is not None:
            raise error

    def _next_id(self, table):
        value = self._next_ids.get(table, 0) + 1
        self._next_ids[table] = value
        return value


def _matches(row, filters):
    for column, operator, value in filters:
        actual = row.get(column)
        if operator == "eq":
            if str(actual) != str(value):
                return False
        elif operator == "ilike":
            needle = str(value).strip("*%").casefold()
            if needle not in str(actual or "").casefold():
                return False
        else:
            raise AssertionError(f"unsupported operator in fake: {operator}")
    return True


@pytest.fixture
def manual_runner():
    return ManualTaskRunner()


@pytest.fixture
def backend():
    fake = FakeSupabase()
    admin = fake.add_auth_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    member = fake.add_auth_user(MEMBER_EMAIL, MEMBER_PASSWORD)
    fake.add_row(
        "usuarios",
        {
            "nome": "Ana Admin",
            "email": ADMIN_EMAIL,
            "telefone": "41999998888",
            "id_administradora": 1,
            "id_authentication": admin.id,
            "tipo_acesso": "admin",
        },
    )
    fake.add_row(
        "usuarios",
        {
            "nome": "Bruno Morador",
            "email": MEMBER_EMAIL,
            "telefone": None,
            "id_administradora": 1,
            "id_authentication": member.id,
            "tipo_acesso": "usuario",
        },
    )
    fake.login_as(ADMIN_EMAIL)
    fake.calls.clear()
    return fake


@pytest.fixture
def condominio_service(backend):
    return CondominioService(backend)


@pytest.fixture
def usuario_service(backend):
    return UsuarioService(backend)
