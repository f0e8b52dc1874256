from __future__ import annotations

import logging
from typing import Protocol

from translate_manager.core.config import ManagerConfig
from translate_manager.core.exceptions import ServiceError
from translate_manager.integrations.translate import AmazonTranslateClient
from translate_manager.services.error_reporting import ErrorCollector
from translate_manager.utils import optional_text, require_text

logger = logging.getLogger(__name__)


class Translator(Protocol):
    """Anything able to translate one string into one target language."""

    async def translate(self, text: str, target_language: str | None = None) -> str:
        """Return ``text`` translated into ``target_language``."""


class TextTranslator:
    """Translate single strings from English, applying the custom terminology if set."""

    def __init__(
        self,
        config: ManagerConfig,
        client: AmazonTranslateClient,
        *,
        errors: ErrorCollector | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._errors = errors or ErrorCollector()

    @property
    def default_target_language(self) -> str:
        return self._config.default_target_language

    async def translate(self, text: str, target_language: str | None = None) -> str:
        text = require_text(text, "text")
        target = optional_text(
            target_language,
            "target_language",
            default=self._config.default_target_language,
        ).strip()
        terminology = [self._config.terminology_name] if self._config.terminology_name else None

        logger.debug(
            "Translating %s characters %s -> %s",
            len(text),
            self._config.source_language,
            target,
            extra={"flag": "translate_text", "action": "translate_text"},
        )

        try:
            return await self._client.translate_text(
                text,
                source_language=self._config.source_language,
                target_language=target,
                terminology_names=terminology,
            )
        except Exception as exc:
            self._errors.add_error(
                "Failed to translate text",
                action="translate_text",
                error=exc,
                details={"text": text, "target_language": target},
            )
            logger.error(
                "Translation into %s failed: %s",
                target,
                exc,
                extra={"flag": "system_error", "action": "translate_text"},
            )
            raise ServiceError(
                "Translation failed",
                details={"target_language": target},
            ) from exc
