from __future__ import annotations

from typing import Callable, TypeVar


DraftT = TypeVar("DraftT")

Validator = Callable[[DraftT], "str | None"]


def run_validator(validator: Validator[DraftT] | None, draft: DraftT) -> str | None:
    """Return the validator's message for ``draft`` or None when it passes.

    Blank messages count as a pass. A validator that raises is treated as a
    failed validation carrying the exception text, so a broken rule can never
    let a draft through to the service.
    """
    if validator is None:
        return None
    try:
        result = validator(draft)
    except Exception as exc:
        text = str(exc).strip()
        return text or "Dados inválidos"
    if result is None:
        return None
    message = str(result).strip()
    return message or None


def first_error(*checks: tuple[bool, str]) -> str | None:
    for failed, message in checks:
        if failed:
            return message
    return None
