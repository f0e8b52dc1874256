from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from translate_manager.core.clients import ClientFactory, build_client_factory
from translate_manager.core.config import AppSettings, ManagerConfig, build_manager_config
from translate_manager.core.exceptions import StorageError
from translate_manager.integrations.storage import S3ObjectStorage
from translate_manager.integrations.translate import AmazonTranslateClient
from translate_manager.schemas.dictionary import DictionaryChange, DictionaryEntry
from translate_manager.schemas.storage import StoredObject
from translate_manager.services.bulk import BulkTranslationOrchestrator
from translate_manager.services.dictionary import AutoTranslateResult, DictionaryStore
from translate_manager.services.error_reporting import ErrorCollector, ErrorDispatcher
from translate_manager.services.terminology import TerminologyCsvExporter, TerminologyImporter
from translate_manager.services.translation import TextTranslator


logger = logging.getLogger(__name__)


class TranslationManager:
    """Single entry point over the dictionary, terminology and translation services."""

    def __init__(
        self,
        config: ManagerConfig,
        *,
        s3_client_factory: ClientFactory,
        translate_client_factory: ClientFactory,
        errors: ErrorCollector | None = None,
    ) -> None:
        self.config = config
        self.errors = errors or ErrorCollector()
        self.storage = S3ObjectStorage(config.bucket, client_factory=s3_client_factory)
        self.translate_client = AmazonTranslateClient(client_factory=translate_client_factory)

        self.translator = TextTranslator(config, self.translate_client, errors=self.errors)
        self.dictionary = DictionaryStore(
            config,
            self.storage,
            translator=self.translator,
            errors=self.errors,
        )
        self.exporter = TerminologyCsvExporter(
            config,
            self.storage,
            lambda: self.dictionary.entries,
            errors=self.errors,
        )
        self.importer = TerminologyImporter(
            config,
            self.storage,
            self.translate_client,
            errors=self.errors,
        )
        self.bulk = BulkTranslationOrchestrator(
            config,
            self.storage,
            self.translator,
            self.translate_client,
            errors=self.errors,
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> TranslationManager:
        """Validate settings and build the AWS clients once."""
        config = build_manager_config(settings)
        return cls(
            config,
            s3_client_factory=build_client_factory(settings, "s3"),
            translate_client_factory=build_client_factory(settings, "translate"),
            errors=ErrorCollector(dispatcher=ErrorDispatcher(settings)),
        )

    async def translate_text(self, text: str, target_language: str | None = None) -> str:
        return await self.translator.translate(text, target_language)

    async def start_bulk_translation(
        self,
        input_uri: str,
        output_uri: str,
        target_languages: Sequence[str] | None = None,
    ) -> str:
        return await self.bulk.start(input_uri, output_uri, target_languages)

    async def load_dictionary(self) -> list[DictionaryEntry]:
        return await self.dictionary.load()

    def add_or_update_entry(self, source: str, language: str, translation: str) -> DictionaryChange:
        return self.dictionary.add_or_update(source, language, translation)

    def delete_entry(self, source: str, language: str) -> bool:
        return self.dictionary.delete(source, language)

    async def save_dictionary(self) -> None:
        await self.dictionary.save()

    async def auto_translate_missing(self) -> AutoTranslateResult:
        return await self.dictionary.auto_translate_missing()

    async def export_terminology_csv(self, target_language: str | None = None) -> str:
        return await self.exporter.export(target_language)

    async def import_terminology(self, target_language: str | None = None) -> dict[str, Any]:
        return await self.importer.import_terminology(target_language)

    async def list_bucket_files(self, prefix: str | None = None) -> list[StoredObject]:
        try:
            objects = await self.storage.list_objects(prefix=prefix)
        except StorageError as exc:
            self.errors.add_error(
                "Failed to list files in S3 bucket",
                action="list_bucket_files",
                error=exc,
                details={"bucket": self.storage.bucket, "prefix": prefix},
            )
            logger.error(
                "Bucket listing failed: %s",
                exc,
                extra={"flag": "system_error", "action": "list_bucket_files"},
            )
            raise StorageError(
                "Could not list files in S3 bucket",
                details={"bucket": self.storage.bucket},
            ) from exc

        logger.info(
            "Retrieved %s files from s3://%s",
            len(objects),
            self.storage.bucket,
            extra={"flag": "bucket_listing", "action": "list_bucket_files"},
        )
        return objects
