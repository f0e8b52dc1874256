from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class TranslateTextRequest(BaseModel):
    text: str = Field(..., description="English text to translate.")
    target_language: str | None = Field(
        default=None,
        description="Target language code. Defaults to the configured default language.",
    )


class TranslateTextResponse(BaseModel):
    target_language: str = Field(..., description="Language the text was translated into.")
    translated_text: str


class BulkTranslationRequest(BaseModel):
    input_uri: str = Field(..., description="s3://bucket/key, or a key in the configured bucket.")
    output_uri: str = Field(..., description="s3://bucket/key, or a key in the configured bucket.")
    target_languages: list[str] | None = Field(
        default=None,
        description="Target language codes. Defaults to the configured default language.",
    )


class BulkTranslationResponse(BaseModel):
    job_id: str = Field(..., description="Batch job id, or the manual completion marker.")
    mode: Literal["batch", "manual"]
    completed: bool = Field(
        ...,
        description="True when results are already written (manual path).",
    )


class TerminologyRequest(BaseModel):
    target_language: str | None = Field(
        default=None,
        description="Language to export or import. Defaults to the configured default language.",
    )


class TerminologyExportResponse(BaseModel):
    key: str
    target_language: str
    rows: int
    csv: str


class TerminologyImportResponse(BaseModel):
    name: str
    target_language: str
    properties: dict[str, Any] = Field(default_factory=dict)
