from __future__ import annotations

from fastapi import APIRouter, Depends, status

from translate_manager.api.deps import get_translation_manager
from translate_manager.schemas.translation import (
    BulkTranslationRequest,
    BulkTranslationResponse,
    TranslateTextRequest,
    TranslateTextResponse,
)
from translate_manager.services.bulk import MANUAL_JOB_SENTINEL
from translate_manager.services.manager import TranslationManager

router = APIRouter()


@router.post(
    "/text",
    response_model=TranslateTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Translate a single English string.",
)
async def translate_text(
    payload: TranslateTextRequest,
    manager: TranslationManager = Depends(get_translation_manager),
) -> TranslateTextResponse:
    target = payload.target_language or manager.config.default_target_language
    translated = await manager.translate_text(payload.text, target)
    return TranslateTextResponse(target_language=target, translated_text=translated)


@router.post(
    "/bulk",
    response_model=BulkTranslationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Translate a whole stored object into one or more languages.",
)
async def start_bulk_translation(
    payload: BulkTranslationRequest,
    manager: TranslationManager = Depends(get_translation_manager),
) -> BulkTranslationResponse:
    """Submit a batch job, or run the manual fallback to completion when no role is set."""
    job_id = await manager.start_bulk_translation(
        payload.input_uri,
        payload.output_uri,
        payload.target_languages,
    )
    manual = job_id == MANUAL_JOB_SENTINEL
    return BulkTranslationResponse(
        job_id=job_id,
        mode="manual" if manual else "batch",
        completed=manual,
    )
