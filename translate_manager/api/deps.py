import asyncio

from fastapi import Request

from translate_manager.services.manager import TranslationManager


def get_translation_manager(request: Request) -> TranslationManager:
    """Provide the TranslationManager built at application startup."""
    manager: TranslationManager | None = getattr(request.app.state, "manager", None)
    if manager is None:
        raise RuntimeError("Translation manager has not been initialised.")
    return manager


def get_dictionary_lock(request: Request) -> asyncio.Lock:
    """Lock serializing dictionary operations across concurrent requests."""
    return request.app.state.dictionary_lock
