"""Utility helpers for translate-manager."""

from .validation import optional_text, require_languages, require_text

__all__ = [
    "optional_text",
    "require_languages",
    "require_text",
]
