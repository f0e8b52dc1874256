from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Iterable
from typing import Any

from translate_manager.core.config import ManagerConfig
from translate_manager.core.exceptions import (
    ServiceError,
    StorageError,
    ValidationError,
)
from translate_manager.integrations.storage import S3ObjectStorage
from translate_manager.integrations.translate import AmazonTranslateClient
from translate_manager.schemas.dictionary import DictionaryEntry
from translate_manager.services.error_reporting import ErrorCollector
from translate_manager.utils import optional_text


logger = logging.getLogger(__name__)


def normalize_language(value: str) -> str:
    return value.strip().lower()


def terminology_rows(
    entries: Iterable[DictionaryEntry],
    *,
    target_language: str,
) -> list[tuple[str, str]]:
    """Trimmed (source, translation) pairs for ``target_language``, blanks skipped."""
    target = normalize_language(target_language)
    rows: list[tuple[str, str]] = []
    for entry in entries:
        if normalize_language(entry.language) != target:
            continue
        source = entry.source.strip()
        translation = entry.translation.strip()
        if source and translation:
            rows.append((source, translation))
    return rows


def build_terminology_csv(
    entries: Iterable[DictionaryEntry],
    *,
    source_language: str,
    target_language: str,
) -> str:
    """Render entries for ``target_language`` as a two-column terminology CSV.

    The header row carries the language codes, which is the layout Amazon
    Translate expects for CSV terminology files. Values containing commas,
    quotes or line breaks are quoted, so one row may span several lines.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([source_language, normalize_language(target_language)])
    writer.writerows(terminology_rows(entries, target_language=target_language))
    return buffer.getvalue()


class TerminologyCsvExporter:
    """Writes the dictionary, filtered to one language, as the terminology CSV."""

    def __init__(
        self,
        config: ManagerConfig,
        storage: S3ObjectStorage,
        entries_provider: Callable[[], list[DictionaryEntry]],
        *,
        errors: ErrorCollector | None = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._entries_provider = entries_provider
        self._errors = errors or ErrorCollector()

    async def export(self, target_language: str | None = None) -> str:
        target = optional_text(
            target_language,
            "target_language",
            default=self._config.default_target_language,
        )
        entries = self._entries_provider()
        rows = len(terminology_rows(entries, target_language=target))
        csv_text = build_terminology_csv(
            entries,
            source_language=self._config.source_language,
            target_language=target,
        )
        logger.debug("Generated terminology CSV for %s:\n%s", target, csv_text)

        try:
            await self._storage.put_object(
                self._config.csv_key,
                csv_text,
                content_type="text/csv",
            )
        except StorageError as exc:
            self._errors.add_error(
                "Failed to convert and upload CSV",
                action="export_terminology_csv",
                error=exc,
                details={"bucket": self._storage.bucket, "key": self._config.csv_key},
            )
            logger.error(
                "Terminology CSV upload failed: %s",
                exc,
                extra={"flag": "system_error", "action": "export_terminology_csv"},
            )
            raise StorageError(
                "Could not convert dictionary to CSV and upload",
                details={"bucket": self._storage.bucket, "key": self._config.csv_key},
            ) from exc

        logger.info(
            "Uploaded terminology CSV with %s rows to s3://%s/%s",
            rows,
            self._storage.bucket,
            self._config.csv_key,
            extra={"flag": "csv_uploaded", "action": "export_terminology_csv"},
        )
        return csv_text


class TerminologyImporter:
    """Replaces the named custom terminology with the CSV stored in the bucket.

    The CSV must already exist; a missing object is an error here, unlike the
    dictionary snapshot which loads as empty.
    """

    def __init__(
        self,
        config: ManagerConfig,
        storage: S3ObjectStorage,
        client: AmazonTranslateClient,
        *,
        errors: ErrorCollector | None = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._client = client
        self._errors = errors or ErrorCollector()

    async def import_terminology(self, target_language: str | None = None) -> dict[str, Any]:
        target = optional_text(
            target_language,
            "target_language",
            default=self._config.default_target_language,
        )
        name = self._config.terminology_name
        if not name:
            raise ValidationError(
                "A custom terminology name must be configured to import terminology",
                details={"field": "terminology_name"},
            )

        location = {"bucket": self._storage.bucket, "key": self._config.csv_key}
        try:
            csv_bytes = await self._storage.get_bytes(self._config.csv_key)
        except StorageError as exc:
            self._record_failure(exc, location)
            raise StorageError(
                "Failed to import dictionary to AWS Translate",
                details=location,
            ) from exc

        try:
            properties = await self._client.import_terminology(
                name=name,
                data=csv_bytes,
                description=f"Overrides for {target}",
                merge_strategy="OVERWRITE",
                data_format="CSV",
            )
        except Exception as exc:
            self._record_failure(exc, location)
            raise ServiceError(
                "Failed to import dictionary to AWS Translate",
                details={"name": name, "target_language": target},
            ) from exc

        logger.info(
            "Custom terminology %s imported for %s (%s terms)",
            name,
            target,
            properties.get("TermCount", "?"),
            extra={"flag": "dictionary_imported", "action": "import_terminology"},
        )
        return properties

    def _record_failure(self, exc: Exception, location: dict[str, str]) -> None:
        self._errors.add_error(
            "Failed to import custom terminology",
            action="import_terminology",
            error=exc,
            details=location,
        )
        logger.error(
            "Terminology import failed: %s",
            exc,
            extra={"flag": "system_error", "action": "import_terminology"},
        )
