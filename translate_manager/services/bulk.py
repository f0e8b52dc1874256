"""
Bulk translation of a whole input object.

Two paths, chosen once per call:

* with a data-access role configured, an Amazon Translate batch job is
  submitted and its ``JobId`` returned straight away (no polling);
* without one, the input is downloaded, split into translatable units,
  translated unit by unit and language by language, and the assembled
  records are written to the output location. A failed (unit, language)
  pair becomes ``None`` in the output instead of failing the batch.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from translate_manager.core.config import ManagerConfig
from translate_manager.core.exceptions import ServiceError, StorageError
from translate_manager.integrations.storage import S3ObjectStorage, parse_s3_uri
from translate_manager.integrations.translate import AmazonTranslateClient
from translate_manager.services.error_reporting import ErrorCollector
from translate_manager.services.translation import Translator
from translate_manager.utils import require_languages, require_text


logger = logging.getLogger(__name__)

MANUAL_JOB_SENTINEL = "manual-job-done"
_TEXT_FIELDS = ("Text", "text", "source")
_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True, slots=True)
class TranslatableUnit:
    text: str
    source_item: Any


def parse_input_items(raw_text: str) -> list[Any]:
    """Split raw input into items.

    A JSON array is used as-is, then a JSON object's ``translations`` array.
    Anything else, including an empty array, falls back to non-blank lines.
    """
    items: list[Any] = []
    try:
        parsed = json.loads(raw_text)
    except ValueError:
        parsed = None

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("translations"), list):
        items = parsed["translations"]

    if items:
        return items

    logger.warning("Input is not a non-empty JSON array of items; reading it line by line.")
    return [line for line in _LINE_BREAK.split(raw_text) if line.strip()]


def extract_text(item: Any) -> str | None:
    if isinstance(item, str):
        return item if item.strip() else None
    if isinstance(item, dict):
        for field_name in _TEXT_FIELDS:
            value = item.get(field_name)
            if isinstance(value, str) and value.strip():
                return value
    return None


def extract_units(items: Sequence[Any]) -> list[TranslatableUnit]:
    units: list[TranslatableUnit] = []
    for item in items:
        text = extract_text(item)
        if text is None:
            logger.warning("Skipping item with no translatable text: %r", item)
            continue
        units.append(TranslatableUnit(text=text, source_item=item))
    return units


class BulkTranslationOrchestrator:
    """Translate an input object into one or more languages."""

    def __init__(
        self,
        config: ManagerConfig,
        storage: S3ObjectStorage,
        translator: Translator,
        client: AmazonTranslateClient,
        *,
        errors: ErrorCollector | None = None,
    ) -> None:
        self._config = config
        self._storage = storage
        self._translator = translator
        self._client = client
        self._errors = errors or ErrorCollector()

    async def start(
        self,
        input_uri: str,
        output_uri: str,
        target_languages: Sequence[str] | None = None,
    ) -> str:
        """Return the batch ``JobId``, or ``MANUAL_JOB_SENTINEL`` once the fallback finishes."""
        require_text(input_uri, "input_uri")
        require_text(output_uri, "output_uri")
        languages = require_languages(
            target_languages,
            "target_languages",
            default=[self._config.default_target_language],
        )
        input_location = parse_s3_uri(input_uri, default_bucket=self._storage.bucket)
        output_location = parse_s3_uri(output_uri, default_bucket=self._storage.bucket)

        logger.info(
            "Bulk translation s3://%s/%s -> s3://%s/%s into %s",
            *input_location,
            *output_location,
            ", ".join(languages),
            extra={"flag": "bulk_translation", "action": "start_bulk_translation"},
        )

        if self._config.role_arn:
            return await self._start_batch_job(input_location, output_location, languages)

        logger.info(
            "Translate role not configured; running manual translation",
            extra={"flag": "manual_fallback", "action": "start_bulk_translation"},
        )
        await self._run_manual(input_location, output_location, languages)
        return MANUAL_JOB_SENTINEL

    async def translate_content(
        self,
        raw_text: str,
        target_languages: Sequence[str],
    ) -> list[dict[str, Any]]:
        units = extract_units(parse_input_items(raw_text))
        return await self.translate_units(units, target_languages)

    async def translate_units(
        self,
        units: Sequence[TranslatableUnit],
        target_languages: Sequence[str],
    ) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        failures = 0
        for unit in units:
            record: dict[str, Any] = {"original": unit.text}
            for language in target_languages:
                try:
                    record[language] = await self._translator.translate(unit.text, language)
                except Exception as exc:
                    failures += 1
                    record[language] = None
                    self._errors.add_error(
                        "Manual translation of one item failed",
                        action="manual_translate",
                        error=exc,
                        critical=False,
                        details={"text": unit.text, "language": language},
                    )
                    logger.warning(
                        "Translation into %s failed for one item: %s",
                        language,
                        exc,
                        extra={"flag": "translation_error", "action": "manual_translate"},
                    )
            records.append(record)

        logger.info(
            "Translated %s items into %s languages (%s failed pairs)",
            len(records),
            len(target_languages),
            failures,
        )
        return records

    async def _start_batch_job(
        self,
        input_location: tuple[str, str],
        output_location: tuple[str, str],
        languages: list[str],
    ) -> str:
        input_uri = "s3://{}/{}".format(*input_location)
        output_uri = "s3://{}/{}".format(*output_location)
        job_name = f"bulk-translate-{time.time_ns() // 1_000_000}"
        terminology = [self._config.terminology_name] if self._config.terminology_name else None
        try:
            return await self._client.start_text_translation_job(
                job_name=job_name,
                input_uri=input_uri,
                output_uri=output_uri,
                content_type=self._config.bulk_content_type,
                role_arn=self._config.role_arn or "",
                source_language=self._config.source_language,
                target_languages=languages,
                terminology_names=terminology,
            )
        except Exception as exc:
            details = {
                "job_name": job_name,
                "input_uri": input_uri,
                "output_uri": output_uri,
                "target_languages": languages,
            }
            self._errors.add_error(
                "Failed to start AWS translation job",
                action="start_bulk_translation",
                error=exc,
                details=details,
            )
            logger.error(
                "Translation job %s could not be started: %s",
                job_name,
                exc,
                extra={"flag": "system_error", "action": "start_bulk_translation"},
            )
            raise ServiceError("Bulk translation job failed", details=details) from exc

    async def _run_manual(
        self,
        input_location: tuple[str, str],
        output_location: tuple[str, str],
        languages: list[str],
    ) -> None:
        input_bucket, input_key = input_location
        output_bucket, output_key = output_location
        try:
            raw_text = await self._storage.get_text(input_key, bucket=input_bucket)
            records = await self.translate_content(raw_text, languages)
            await self._storage.put_json(output_key, records, bucket=output_bucket)
        except StorageError as exc:
            details = {
                "input": f"s3://{input_bucket}/{input_key}",
                "output": f"s3://{output_bucket}/{output_key}",
            }
            self._errors.add_error(
                "Manual translation failed",
                action="manual_translation",
                error=exc,
                details=details,
            )
            logger.error(
                "Manual translation failed: %s",
                exc,
                extra={"flag": "system_error", "action": "manual_translation"},
            )
            raise StorageError(f"Manual translation failed: {exc}", details=details) from exc
