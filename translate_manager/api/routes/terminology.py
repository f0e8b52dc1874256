from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from translate_manager.api.deps import get_dictionary_lock, get_translation_manager
from translate_manager.schemas.translation import (
    TerminologyExportResponse,
    TerminologyImportResponse,
    TerminologyRequest,
)
from translate_manager.services.manager import TranslationManager
from translate_manager.services.terminology import terminology_rows

router = APIRouter()


@router.post(
    "/export",
    response_model=TerminologyExportResponse,
    summary="Write the dictionary for one language as the terminology CSV.",
)
async def export_terminology(
    payload: TerminologyRequest,
    manager: TranslationManager = Depends(get_translation_manager),
    lock: asyncio.Lock = Depends(get_dictionary_lock),
) -> TerminologyExportResponse:
    target = payload.target_language or manager.config.default_target_language
    async with lock:
        csv_text = await manager.export_terminology_csv(target)
        rows = terminology_rows(manager.dictionary.entries, target_language=target)
    return TerminologyExportResponse(
        key=manager.config.csv_key,
        target_language=target,
        rows=len(rows),
        csv=csv_text,
    )


@router.post(
    "/import",
    response_model=TerminologyImportResponse,
    summary="Import the stored terminology CSV into Amazon Translate (overwrite).",
)
async def import_terminology(
    payload: TerminologyRequest,
    manager: TranslationManager = Depends(get_translation_manager),
) -> TerminologyImportResponse:
    target = payload.target_language or manager.config.default_target_language
    properties = await manager.import_terminology(target)
    return TerminologyImportResponse(
        name=manager.config.terminology_name or "",
        target_language=target,
        properties=properties,
    )
