"""
Error taxonomy shared by every public operation.

Callers only ever see the operation-named message; the underlying fault is
kept on ``__cause__`` and in the error collector.
"""

from __future__ import annotations

from typing import Any


class TranslationManagerError(Exception):
    """Base class for all translate-manager failures."""

    default_code = "TRANSLATION_MANAGER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class ValidationError(TranslationManagerError):
    """Bad or missing input to a public operation. Raised before any I/O."""

    default_code = "VALIDATION_ERROR"


class StorageError(TranslationManagerError):
    """Object store fetch, put or list fault."""

    default_code = "STORAGE_ERROR"


class ObjectNotFoundError(StorageError):
    """The requested object key does not exist in the bucket."""

    default_code = "OBJECT_NOT_FOUND"

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(
            f"Object s3://{bucket}/{key} does not exist",
            details={"bucket": bucket, "key": key},
        )
        self.bucket = bucket
        self.key = key


class ServiceError(TranslationManagerError):
    """Translation service call fault."""

    default_code = "SERVICE_ERROR"
