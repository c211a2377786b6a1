"""Validation message formatting and the password strength policy."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email

from taskboard.core.config import Settings

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})
_REQUIRED = "The {label} field is required."
_MESSAGE_TEMPLATES: dict[str, str] = {
    "missing": _REQUIRED,
    "string_type": "The {label} field must be a string.",
    "string_too_long": "The {label} field must not be greater than {max_length} characters.",
    "int_type": "The {label} field must be an integer.",
    "int_parsing": "The {label} field must be an integer.",
    "int_from_float": "The {label} field must be an integer.",
    "greater_than_equal": "The {label} field must be at least {ge}.",
    "less_than_equal": "The {label} field must not be greater than {le}.",
    "enum": "The selected {label} is invalid.",
    "literal_error": "The selected {label} is invalid.",
    "bool_type": "The {label} field must be true or false.",
    "bool_parsing": "The {label} field must be true or false.",
    "model_attributes_type": "The request body must be a JSON object.",
    "dict_type": "The request body must be a JSON object.",
    "json_invalid": "The request body must be valid JSON.",
}


def format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error entries into ``{field: [message, ...]}``.

    Request locations (``body``, ``query``...) are dropped from the key so the
    same field reports under the same name wherever it came from. Entries that
    do not point at a field (malformed JSON, a non-object body) are reported
    under ``body``.
    """
    formatted: dict[str, list[str]] = {}
    for entry in errors:
        field = _field_key(entry)
        message = _render_message(field, entry)
        messages = formatted.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return formatted


def _field_key(entry: Mapping[str, Any]) -> str:
    if entry.get("type") == "json_invalid":
        return "body"

    parts = [str(part) for part in entry.get("loc", ())]
    if len(parts) > 1 and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _render_message(field: str, entry: Mapping[str, Any]) -> str:
    error_type = str(entry.get("type", ""))
    ctx = dict(entry.get("ctx") or {})
    label = field.rsplit(".", 1)[-1].replace("_", " ")

    if error_type == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if error_type == "string_too_short":
        min_length = int(ctx.get("min_length", 1))
        if min_length <= 1:
            return _REQUIRED.format(label=label)
        return f"The {label} field must be at least {min_length} characters."

    template = _MESSAGE_TEMPLATES.get(error_type)
    if template is None:
        return str(entry.get("msg") or "The given data was invalid.")
    try:
        return template.format(label=label, **ctx)
    except (KeyError, IndexError):
        return str(entry.get("msg") or "The given data was invalid.")


def normalize_email(value: str) -> str:
    """Validate an email address syntactically and return its normalized form."""
    try:
        result = validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("The email field must be a valid email address.") from exc
    return result.normalized


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    """Configurable password strength rules."""

    min_length: int = 8
    require_letters: bool = False
    require_mixed_case: bool = False
    require_numbers: bool = False
    require_symbols: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> PasswordPolicy:
        return cls(
            min_length=settings.password_min_length,
            require_letters=settings.password_require_letters,
            require_mixed_case=settings.password_require_mixed_case,
            require_numbers=settings.password_require_numbers,
            require_symbols=settings.password_require_symbols,
        )

    def violations(self, password: str) -> list[str]:
        messages: list[str] = []
        if len(password) < self.min_length:
            messages.append(f"The password field must be at least {self.min_length} characters.")
        if self.require_letters and not any(ch.isalpha() for ch in password):
            messages.append("The password field must contain at least one letter.")
        if self.require_mixed_case and not (
            any(ch.isupper() for ch in password) and any(ch.islower() for ch in password)
        ):
            messages.append("The password field must contain at least one uppercase and one lowercase letter.")
        if self.require_numbers and not any(ch.isdigit() for ch in password):
            messages.append("The password field must contain at least one number.")
        if self.require_symbols and not any(not ch.isalnum() and not ch.isspace() for ch in password):
            messages.append("The password field must contain at least one symbol.")
        return messages
