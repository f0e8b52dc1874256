from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from translate_manager.core.clients import ClientFactory


logger = logging.getLogger(__name__)


class AmazonTranslateClient:
    """Thin wrapper around the Amazon Translate API.

    Faults propagate unchanged; the calling service decides how to wrap them.
    """

    def __init__(self, *, client_factory: ClientFactory):
        self._client_factory = client_factory

    async def translate_text(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        terminology_names: Sequence[str] | None = None,
    ) -> str:
        params: dict[str, Any] = {
            "Text": text,
            "SourceLanguageCode": source_language,
            "TargetLanguageCode": target_language,
        }
        if terminology_names:
            params["TerminologyNames"] = list(terminology_names)

        async with self._client_factory() as client:
            response = await client.translate_text(**params)
        return response["TranslatedText"]

    async def start_text_translation_job(
        self,
        *,
        job_name: str,
        input_uri: str,
        output_uri: str,
        content_type: str,
        role_arn: str,
        source_language: str,
        target_languages: Sequence[str],
        terminology_names: Sequence[str] | None = None,
    ) -> str:
        params: dict[str, Any] = {
            "JobName": job_name,
            "InputDataConfig": {"S3Uri": input_uri, "ContentType": content_type},
            "OutputDataConfig": {"S3Uri": output_uri},
            "DataAccessRoleArn": role_arn,
            "SourceLanguageCode": source_language,
            "TargetLanguageCodes": list(target_languages),
        }
        if terminology_names:
            params["TerminologyNames"] = list(terminology_names)

        async with self._client_factory() as client:
            response = await client.start_text_translation_job(**params)
        logger.info(
            "Started translation job %s (%s) for %s",
            response.get("JobId"),
            response.get("JobStatus", "SUBMITTED"),
            ", ".join(target_languages),
        )
        return response["JobId"]

    async def import_terminology(
        self,
        *,
        name: str,
        data: bytes,
        description: str,
        merge_strategy: str = "OVERWRITE",
        data_format: str = "CSV",
    ) -> dict[str, Any]:
        async with self._client_factory() as client:
            response = await client.import_terminology(
                Name=name,
                MergeStrategy=merge_strategy,
                Description=description,
                TerminologyData={"File": data, "Format": data_format},
            )
        return response.get("TerminologyProperties", {})
