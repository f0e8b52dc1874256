from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from translate_manager.core.exceptions import ValidationError


def require_text(value: Any, name: str) -> str:
    """Return ``value`` unchanged if it is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{name} must be a non-empty string",
            details={"field": name},
        )
    return value


def optional_text(value: Any, name: str, *, default: str) -> str:
    if value is None:
        return default
    return require_text(value, name)


def require_languages(value: Any, name: str, *, default: Sequence[str]) -> list[str]:
    """Normalize a target language list, falling back to ``default`` when unset."""
    if value is None:
        return list(default)
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValidationError(
            f"{name} must be a list of language codes",
            details={"field": name},
        )

    languages = [require_text(item, name).strip() for item in value]
    if not languages:
        raise ValidationError(
            f"{name} must contain at least one language code",
            details={"field": name},
        )
    return languages
