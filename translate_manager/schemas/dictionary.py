from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


DictionaryChange = Literal["added", "updated"]


class DictionaryEntry(BaseModel):
    """One terminology override: ``source`` rendered as ``translation`` in ``language``."""

    model_config = ConfigDict(extra="ignore")

    source: str = Field(..., description="Source-language (English) term.")
    language: str = Field("", description="Target language code, e.g. 'fr'.")
    translation: str = Field("", description="Preferred translation; blank until filled.")

    @field_validator("language", "translation", mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def matches(self, source: str, language: str) -> bool:
        """Identity check on (source, language), ignoring case."""
        return (
            self.source.lower() == source.lower()
            and self.language.lower() == language.lower()
        )


class DictionaryEntryUpsert(BaseModel):
    source: str = Field(..., description="Source-language term.")
    language: str = Field(..., description="Target language code.")
    translation: str = Field(..., description="Translation to store for the term.")


class DictionaryEntryKey(BaseModel):
    source: str = Field(..., description="Source-language term.")
    language: str = Field(..., description="Target language code.")


class DictionaryChangeResponse(BaseModel):
    status: Literal["added", "updated", "deleted", "not_found"]
    message: str
    total: int = Field(..., description="Number of entries after the change.")


class DictionaryListResponse(BaseModel):
    entries: list[DictionaryEntry] = Field(default_factory=list)
    total: int = 0


class AutoTranslateResponse(BaseModel):
    candidates: int = 0
    translated: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


class DictionarySaveResponse(BaseModel):
    key: str
    total: int
