from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Any, Callable, Iterable, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from condoadmin.app.db_debug import db_debug
from condoadmin.app.settings_store import SupabaseSettings


Filter = tuple[str, str, Any]
Opener = Callable[..., Any]

_SINGLE_OBJECT_ACCEPT = "application/vnd.pgrst.object+json"
_FILTER_OPERATORS = {"eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike", "is", "in"}


class SupabaseRequestError(RuntimeError):
    """Raised for any failed PostgREST or GoTrue round-trip.

    ``status`` is the HTTP status (0 for transport failures) and ``code`` the
    backend error code (``"23505"``, ``"PGRST116"``, ``"invalid_credentials"``).
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        code: str = "",
        details: Any = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = int(status)
        self.code = str(code or "")
        self.details = details
        self.hint = str(hint or "")

    @property
    def transport_failure(self) -> bool:
        return self.status == 0


@dataclass(frozen=True, slots=True)
class AuthUser:
    id: str
    email: str = ""

    @classmethod
    def from_mapping(cls, value: Any) -> AuthUser | None:
        if not isinstance(value, dict):
            return None
        user_id = str(value.get("id", "") or "").strip()
        if not user_id:
            return None
        return cls(id=user_id, email=str(value.get("email", "") or "").strip())


@dataclass(frozen=True, slots=True)
class AuthSession:
    access_token: str
    refresh_token: str
    user: AuthUser
    expires_at: int = 0

    @classmethod
    def from_mapping(cls, value: Any) -> AuthSession | None:
        if not isinstance(value, dict):
            return None
        access_token = str(value.get("access_token", "") or "").strip()
        user = AuthUser.from_mapping(value.get("user"))
        if not access_token or user is None:
            return None
        try:
            expires_at = int(value.get("expires_at") or 0)
        except (TypeError, ValueError):
            expires_at = 0
        return cls(
            access_token=access_token,
            refresh_token=str(value.get("refresh_token", "") or "").strip(),
            user=user,
            expires_at=expires_at,
        )


class SupabaseClient:
    """Minimal Supabase REST + auth client over ``urllib``."""

    def __init__(
        self,
        settings: SupabaseSettings,
        *,
        opener: Opener | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._opener: Opener = opener or urlopen
        self._logger = logger or logging.getLogger("condoadmin.supabase")
        self._session: AuthSession | None = None
        self._session_lock = Lock()

    @property
    def settings(self) -> SupabaseSettings:
        return self._settings

    @property
    def session(self) -> AuthSession | None:
        with self._session_lock:
            return self._session

    def set_session(self, session: AuthSession | None) -> None:
        with self._session_lock:
            self._session = session

    # ------------------------------------------------------------------ REST

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order: str | None = None,
        ascending: bool = True,
        single: bool = False,
    ) -> Any:
        params = [f"select={quote(columns, safe='*,()')}"]
        params.extend(_render_filters(filters))
        if order:
            direction = "asc" if ascending else "desc"
            params.append(f"order={quote(order, safe='_')}.{direction}")
        return self._request_json(
            method="GET",
            path=f"/rest/v1/{quote(table, safe='_')}",
            query=_join_query(params),
            accept=_SINGLE_OBJECT_ACCEPT if single else "",
        )

    def insert(self, table: str, row: dict[str, Any], *, single: bool = True) -> Any:
        return self._request_json(
            method="POST",
            path=f"/rest/v1/{quote(table, safe='_')}",
            query="?select=*",
            payload=row,
            prefer="return=representation",
            accept=_SINGLE_OBJECT_ACCEPT if single else "",
        )

    def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: Sequence[Filter],
        single: bool = True,
    ) -> Any:
        if not filters:
            raise ValueError("Refusing to update without filters.")
        params = ["select=*", *_render_filters(filters)]
        return self._request_json(
            method="PATCH",
            path=f"/rest/v1/{quote(table, safe='_')}",
            query=_join_query(params),
            payload=values,
            prefer="return=representation",
            accept=_SINGLE_OBJECT_ACCEPT if single else "",
        )

    def delete(self, table: str, *, filters: Sequence[Filter]) -> None:
        if not filters:
            raise ValueError("Refusing to delete without filters.")
        self._request_json(
            method="DELETE",
            path=f"/rest/v1/{quote(table, safe='_')}",
            query=_join_query(_render_filters(filters)),
            prefer="return=minimal",
        )

    # ------------------------------------------------------------------ auth

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        session = self.verify_password(email, password)
        self.set_session(session)
        self._logger.info("Signed in as %s", session.user.email or session.user.id)
        return session

    def verify_password(self, email: str, password: str) -> AuthSession:
        """Authenticate without replacing the current session."""
        payload = self._request_json(
            method="POST",
            path="/auth/v1/token",
            query="?grant_type=password",
            payload={"email": email, "password": password},
            use_session=False,
        )
        session = AuthSession.from_mapping(payload)
        if session is None:
            raise SupabaseRequestError("Resposta de autenticação inválida.", status=200)
        return session

    def sign_up(self, email: str, password: str) -> AuthUser:
        payload = self._request_json(
            method="POST",
            path="/auth/v1/signup",
            payload={"email": email, "password": password},
            use_session=False,
        )
        user = None
        if isinstance(payload, dict):
            user = AuthUser.from_mapping(payload.get("user")) or AuthUser.from_mapping(payload)
        if user is None:
            raise SupabaseRequestError("Resposta de cadastro inválida.", status=200)
        return user

    def update_user(
        self,
        *,
        email: str | None = None,
        password: str | None = None,
        access_token: str | None = None,
    ) -> AuthUser:
        attributes: dict[str, str] = {}
        if email:
            attributes["email"] = email
        if password:
            attributes["password"] = password
        payload = self._request_json(
            method="PUT",
            path="/auth/v1/user",
            payload=attributes,
            bearer=access_token,
        )
        user = AuthUser.from_mapping(payload)
        if user is None:
            raise SupabaseRequestError("Resposta de atualização de usuário inválida.", status=200)
        return user

    def get_user(self) -> AuthUser | None:
        session = self.session
        if session is None:
            return None
        try:
            payload = self._request_json(method="GET", path="/auth/v1/user")
        except SupabaseRequestError as exc:
            if exc.status in (401, 403):
                return None
            raise
        return AuthUser.from_mapping(payload)

    def sign_out(self) -> None:
        session = self.session
        if session is None:
            return
        try:
            self._request_json(method="POST", path="/auth/v1/logout", expect_json=False)
        except SupabaseRequestError as exc:
            self._logger.warning("Remote sign-out failed: %s", exc)
        finally:
            self.set_session(None)

    # --------------------------------------------------------------- transport

    def _require_settings(self) -> SupabaseSettings:
        if self._settings.configured:
            return self._settings
        raise SupabaseRequestError(
            "Supabase não configurado: informe a URL e a chave anônima do projeto."
        )

    def _request_json(
        self,
        *,
        method: str,
        path: str,
        query: str = "",
        payload: Any | None = None,
        prefer: str = "",
        accept: str = "",
        expect_json: bool = True,
        use_session: bool = True,
        bearer: str | None = None,
    ) -> Any:
        settings = self._require_settings()
        request_url = f"{settings.url.rstrip('/')}{path}{query}"
        request_data: bytes | None = None
        if payload is not None:
            request_data = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        token = bearer
        if not token and use_session:
            session = self.session
            if session is not None:
                token = session.access_token
        headers = {
            "apikey": settings.anon_key,
            "Authorization": f"Bearer {token or settings.anon_key}",
            "Accept": accept or "application/json",
        }
        if payload is not None:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer

        db_debug(
            "supabase.request",
            method=method.upper(),
            path=path,
            query_present=bool(query),
            payload_bytes=len(request_data) if request_data is not None else 0,
            single=accept == _SINGLE_OBJECT_ACCEPT,
        )
        request = Request(request_url, data=request_data, headers=headers, method=method.upper())
        started_at = perf_counter()

        try:
            with self._opener(request, timeout=settings.timeout_seconds) as response:
                status_code = int(response.getcode() or 0)
                body = response.read()
        except HTTPError as exc:
            raw_body = b""
            try:
                raw_body = exc.read() or b""
            except OSError:
                raw_body = b""
            error = _error_from_body(raw_body, status=int(exc.code), reason=str(exc.reason))
            db_debug(
                "supabase.request.error",
                method=method.upper(),
                path=path,
                status=error.status,
                code=error.code,
            )
            self._logger.debug("Supabase %s %s failed: %s", method.upper(), path, error)
            raise error from exc
        except (URLError, TimeoutError, OSError) as exc:
            db_debug("supabase.request.error", method=method.upper(), path=path, error=str(exc))
            raise SupabaseRequestError(f"Falha de conexão com o Supabase: {exc}") from exc

        db_debug(
            "supabase.response",
            method=method.upper(),
            path=path,
            status=status_code,
            body_bytes=len(body),
            duration_ms=round((perf_counter() - started_at) * 1000.0, 2),
        )
        if not expect_json or not body:
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            db_debug(
                "supabase.response.parse_error",
                method=method.upper(),
                path=path,
                body_bytes=len(body),
                error=str(exc),
            )
            raise SupabaseRequestError(
                f"Supabase retornou um corpo não-JSON para {path} ({len(body)} bytes).",
                status=status_code,
            ) from exc


def _render_filters(filters: Iterable[Filter]) -> list[str]:
    rendered: list[str] = []
    for column, operator, value in filters:
        op = str(operator or "").strip().lower()
        if op not in _FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {operator!r}")
        if op == "in":
            joined = ",".join(str(entry) for entry in value)
            text = f"({joined})"
        elif value is None:
            text = "null"
        elif isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        rendered.append(f"{quote(str(column), safe='_')}={op}.{quote(text, safe='*(),')}")
    return rendered


def _join_query(params: Sequence[str]) -> str:
    if not params:
        return ""
    return "?" + "&".join(params)


def _error_from_body(raw_body: bytes, *, status: int, reason: str) -> SupabaseRequestError:
    text = raw_body.decode("utf-8", errors="replace").strip()
    parsed: Any = None
    if text:
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
    if not isinstance(parsed, dict):
        message = text or f"{status} {reason}".strip()
        return SupabaseRequestError(message, status=status)

    code_value = parsed.get("code")
    if isinstance(code_value, int) or code_value is None:
        # GoTrue puts the HTTP status in "code" and the symbolic code elsewhere.
        code_value = parsed.get("error_code") or parsed.get("error") or ""
    message = (
        parsed.get("message")
        or parsed.get("msg")
        or parsed.get("error_description")
        or parsed.get("error")
        or f"{status} {reason}".strip()
    )
    return SupabaseRequestError(
        str(message),
        status=status,
        code=str(code_value or ""),
        details=parsed.get("details"),
        hint=str(parsed.get("hint") or ""),
    )
