from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query

from translate_manager.api.deps import get_dictionary_lock, get_translation_manager
from translate_manager.schemas.dictionary import (
    AutoTranslateResponse,
    DictionaryChangeResponse,
    DictionaryEntryUpsert,
    DictionaryListResponse,
    DictionarySaveResponse,
)
from translate_manager.services.manager import TranslationManager

router = APIRouter()


@router.get(
    "",
    response_model=DictionaryListResponse,
    summary="List the in-memory dictionary entries.",
)
async def list_entries(
    language: str | None = Query(default=None, description="Only return entries for this language."),
    manager: TranslationManager = Depends(get_translation_manager),
) -> DictionaryListResponse:
    entries = manager.dictionary.entries
    if language:
        wanted = language.strip().lower()
        entries = [entry for entry in entries if entry.language.strip().lower() == wanted]
    return DictionaryListResponse(entries=entries, total=len(entries))


@router.post(
    "/load",
    response_model=DictionaryListResponse,
    summary="Replace the in-memory dictionary with the stored snapshot.",
)
async def load_dictionary(
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> DictionaryListResponse:
    async with lock:
        entries = await manager.load_dictionary()
    return DictionaryListResponse(entries=entries, total=len(entries))


@router.put(
    "/entries",
    response_model=DictionaryChangeResponse,
    summary="Add an entry or overwrite the translation of an existing one.",
)
async def upsert_entry(
    payload: DictionaryEntryUpsert,
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> DictionaryChangeResponse:
    async with lock:
        change = manager.add_or_update_entry(payload.source, payload.language, payload.translation)
        total = len(manager.dictionary)
    verb = "Updated" if change == "updated" else "Added new"
    return DictionaryChangeResponse(
        status=change,
        message=f'{verb} entry for "{payload.source}" -> "{payload.language}"',
        total=total,
    )


@router.delete(
    "/entries",
    response_model=DictionaryChangeResponse,
    summary="Remove the entry for a source term and language.",
)
async def delete_entry(
    source: str = Query(..., description="Source term to remove."),
    language: str = Query(..., description="Language code of the entry."),
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> DictionaryChangeResponse:
    async with lock:
        removed = manager.delete_entry(source, language)
        total = len(manager.dictionary)
    if removed:
        return DictionaryChangeResponse(
            status="deleted",
            message=f'Deleted entry for "{source}" -> "{language}"',
            total=total,
        )
    return DictionaryChangeResponse(
        status="not_found",
        message=f'No entry found for "{source}" -> "{language}"',
        total=total,
    )


@router.post(
    "/save",
    response_model=DictionarySaveResponse,
    summary="Write the in-memory dictionary to the bucket.",
)
async def save_dictionary(
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> DictionarySaveResponse:
    async with lock:
        await manager.save_dictionary()
        total = len(manager.dictionary)
    return DictionarySaveResponse(key=manager.config.dictionary_key, total=total)


@router.post(
    "/auto-translate",
    response_model=AutoTranslateResponse,
    summary="Machine-translate entries whose translation is blank.",
)
async def auto_translate_missing(
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> AutoTranslateResponse:
    async with lock:
        result = await manager.auto_translate_missing()
    return AutoTranslateResponse(
        candidates=result.candidates,
        translated=result.translated,
        failed=result.failed,
        errors=result.errors,
    )
