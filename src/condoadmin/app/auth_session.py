from __future__ import annotations

import logging

from condoadmin.app.settings_store import save_remembered_email
from condoadmin.app.supabase_client import AuthSession, SupabaseClient, SupabaseRequestError


INVALID_CREDENTIALS_MESSAGE = "E-mail ou senha inválidos. Tente novamente."
UNEXPECTED_LOGIN_MESSAGE = "Erro inesperado. Tente novamente."
MISSING_CREDENTIALS_MESSAGE = "Informe e-mail e senha."

_INVALID_CREDENTIAL_CODES = {"invalid_credentials", "invalid_grant"}

_logger = logging.getLogger("condoadmin.auth")


def login_error_message(exc: BaseException) -> str:
    if isinstance(exc, SupabaseRequestError):
        if "invalid login credentials" in exc.message.casefold():
            return INVALID_CREDENTIALS_MESSAGE
        if exc.code in _INVALID_CREDENTIAL_CODES:
            return INVALID_CREDENTIALS_MESSAGE
        _logger.error("Login failed: %s (status=%s code=%s)", exc.message, exc.status, exc.code)
        return UNEXPECTED_LOGIN_MESSAGE
    if isinstance(exc, ValueError) and str(exc) == MISSING_CREDENTIALS_MESSAGE:
        return MISSING_CREDENTIALS_MESSAGE
    _logger.error("Login failed: %s", exc)
    return UNEXPECTED_LOGIN_MESSAGE


def sign_in(
    client: SupabaseClient,
    email: str,
    password: str,
    *,
    remember: bool = False,
) -> AuthSession:
    normalized_email = str(email or "").strip()
    if not normalized_email or not password:
        raise ValueError(MISSING_CREDENTIALS_MESSAGE)
    session = client.sign_in_with_password(normalized_email, password)
    try:
        save_remembered_email(normalized_email if remember else None)
    except OSError as exc:
        _logger.warning("Could not store remembered e-mail: %s", exc)
    return session
