from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import TypeAdapter

from translate_manager.core.config import ManagerConfig
from translate_manager.core.exceptions import (
    ObjectNotFoundError,
    StorageError,
    ValidationError,
)
from translate_manager.integrations.storage import S3ObjectStorage
from translate_manager.schemas.dictionary import DictionaryChange, DictionaryEntry
from translate_manager.services.error_reporting import ErrorCollector
from translate_manager.services.translation import Translator
from translate_manager.utils import require_text


logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(list[DictionaryEntry])


@dataclass(slots=True)
class AutoTranslateResult:
    candidates: int = 0
    translated: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


class DictionaryStore:
    """In-memory custom terminology backed by a JSON snapshot in the bucket.

    Entries are unique on (source, language), compared case-insensitively.
    Only ``load`` replaces the list wholesale; ``save`` never mutates it.
    """

    def __init__(
        self,
        config: ManagerConfig,
        storage: S3ObjectStorage,
        *,
        translator: Translator | None = None,
        errors: ErrorCollector | None = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._translator = translator
        self._errors = errors or ErrorCollector()
        self._entries: list[DictionaryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[DictionaryEntry]:
        return [entry.model_copy() for entry in self._entries]

    def find(self, source: str, language: str) -> DictionaryEntry | None:
        for entry in self._entries:
            if entry.matches(source, language):
                return entry.model_copy()
        return None

    async def load(self) -> list[DictionaryEntry]:
        bucket, key = self._storage.bucket, self._config.dictionary_key
        try:
            body = await self._storage.get_bytes(key)
        except ObjectNotFoundError:
            logger.info(
                'No dictionary file found at "%s"; starting empty',
                key,
                extra={"flag": "dictionary_missing", "action": "load_dictionary"},
            )
            self._entries = []
            return self.entries
        except StorageError as exc:
            self._record_failure("Failed to load dictionary JSON", "load_dictionary", exc)
            raise StorageError(
                f"Failed to load dictionary: {exc}",
                details={"bucket": bucket, "key": key},
            ) from exc

        try:
            entries = _ENTRY_LIST.validate_json(body)
        except ValueError as exc:
            self._record_failure("Failed to parse dictionary JSON", "load_dictionary", exc)
            raise StorageError(
                f"Failed to load dictionary: {exc}",
                details={"bucket": bucket, "key": key},
            ) from exc

        self._entries = entries
        logger.info("Loaded %s dictionary entries from s3://%s/%s", len(entries), bucket, key)
        return self.entries

    def add_or_update(self, source: str, language: str, translation: str) -> DictionaryChange:
        source = require_text(source, "source")
        language = require_text(language, "language")
        translation = require_text(translation, "translation")

        for index, entry in enumerate(self._entries):
            if entry.matches(source, language):
                entry.translation = translation
                logger.info(
                    'Updated translation for "%s" in "%s"',
                    source,
                    language,
                    extra={"flag": "dictionary_update", "action": "add_or_update", "index": index},
                )
                return "updated"

        self._entries.append(
            DictionaryEntry(source=source, language=language, translation=translation)
        )
        logger.info(
            'Added new translation for "%s" in "%s"',
            source,
            language,
            extra={"flag": "dictionary_add", "action": "add_or_update"},
        )
        return "added"

    def delete(self, source: str, language: str) -> bool:
        source = require_text(source, "source")
        language = require_text(language, "language")

        before = len(self._entries)
        self._entries = [entry for entry in self._entries if not entry.matches(source, language)]
        removed = before - len(self._entries)

        if removed:
            logger.info(
                'Deleted entry for "%s" in "%s"',
                source,
                language,
                extra={"flag": "dictionary_delete", "action": "delete"},
            )
        else:
            logger.info(
                'No entry found for "%s" in "%s"',
                source,
                language,
                extra={"flag": "dictionary_not_found", "action": "delete"},
            )
        return removed > 0

    async def save(self) -> None:
        bucket, key = self._storage.bucket, self._config.dictionary_key
        payload = [entry.model_dump() for entry in self._entries]
        try:
            await self._storage.put_json(key, payload)
        except StorageError as exc:
            self._record_failure("Failed to save dictionary to S3", "save_dictionary", exc)
            raise StorageError(
                "Could not save custom dictionary to S3",
                details={"bucket": bucket, "key": key},
            ) from exc

        logger.info(
            "Custom dictionary saved to s3://%s/%s (%s entries)",
            bucket,
            key,
            len(payload),
            extra={"flag": "dictionary_saved", "action": "save_dictionary"},
        )

    async def auto_translate_missing(self) -> AutoTranslateResult:
        """Fill blank translations in place; failures are recorded and skipped."""
        if self._translator is None:
            raise ValidationError("auto_translate_missing requires a translator")

        result = AutoTranslateResult()
        for entry in self._entries:
            if entry.translation.strip() or not entry.source.strip():
                continue

            result.candidates += 1
            language = entry.language.strip() or self._config.default_target_language
            try:
                entry.translation = await self._translator.translate(entry.source, language)
            except Exception as exc:
                result.failed += 1
                result.errors.append(f"{entry.source} ({language}): {exc}")
                self._errors.add_error(
                    f'Failed to translate "{entry.source}"',
                    action="auto_translate_missing",
                    error=exc,
                    critical=False,
                    details={"source": entry.source, "language": language},
                )
                logger.warning('Skipping "%s" (%s): %s', entry.source, language, exc)
                continue
            result.translated += 1

        logger.info(
            "Auto-translated %s of %s blank dictionary entries",
            result.translated,
            result.candidates,
        )
        return result

    def _record_failure(self, message: str, action: str, exc: Exception) -> None:
        self._errors.add_error(
            message,
            action=action,
            error=exc,
            details={"bucket": self._storage.bucket, "key": self._config.dictionary_key},
        )
        logger.error("%s: %s", message, exc, extra={"flag": "system_error", "action": action})
