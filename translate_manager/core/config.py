from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from translate_manager.core.exceptions import ValidationError


DEFAULT_REGION = "us-east-1"
DEFAULT_CSV_KEY = "custom_terminology.csv"
DEFAULT_TERMINOLOGY_NAME = "my-translate-overrides"
DEFAULT_TARGET_LANGUAGE = "fr"
DEFAULT_BULK_CONTENT_TYPE = "text/plain"
SOURCE_LANGUAGE = "en"


class AppSettings(BaseSettings):
    """Application configuration loaded from environment or .env."""

    app_name: str = Field(default="Translate Manager")
    app_env: str = Field(default="dev", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    aws_region: Optional[str] = Field(default=None, alias="AWS_REGION")
    aws_access_key_id: Optional[SecretStr] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[SecretStr] = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    s3_access_key_id: Optional[SecretStr] = Field(default=None, alias="S3_ACCESS_KEY_ID")
    s3_secret_access_key: Optional[SecretStr] = Field(default=None, alias="S3_SECRET_ACCESS_KEY")
    translate_access_key_id: Optional[SecretStr] = Field(
        default=None, alias="TRANSLATE_ACCESS_KEY_ID"
    )
    translate_secret_access_key: Optional[SecretStr] = Field(
        default=None, alias="TRANSLATE_SECRET_ACCESS_KEY"
    )

    translate_bucket: Optional[str] = Field(default=None, alias="TRANSLATE_BUCKET")
    dictionary_json_key: Optional[str] = Field(default=None, alias="DICTIONARY_JSON_KEY")
    terminology_csv_key: str = Field(default=DEFAULT_CSV_KEY, alias="TERMINOLOGY_CSV_KEY")
    custom_terminology_name: Optional[str] = Field(
        default=DEFAULT_TERMINOLOGY_NAME, alias="CUSTOM_TERMINOLOGY_NAME"
    )
    translate_role_arn: Optional[str] = Field(default=None, alias="TRANSLATE_ROLE_ARN")
    default_target_language: str = Field(
        default=DEFAULT_TARGET_LANGUAGE, alias="DEFAULT_TARGET_LANGUAGE"
    )
    bulk_input_content_type: str = Field(
        default=DEFAULT_BULK_CONTENT_TYPE, alias="BULK_INPUT_CONTENT_TYPE"
    )

    alert_webhook_url: Optional[SecretStr] = Field(default=None, alias="ALERT_WEBHOOK_URL")
    alert_channel: Optional[str] = Field(default=None, alias="ALERT_CHANNEL")
    alert_timeout_seconds: float = Field(default=10.0, alias="ALERT_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@dataclass(frozen=True, slots=True)
class ManagerConfig:
    """Validated constructor-time configuration for the translation manager.

    ``bucket`` and ``dictionary_key`` are required. ``terminology_name`` and
    ``role_arn`` are optional: an empty terminology name disables custom
    terminology, and the presence of ``role_arn`` selects the managed batch
    job over the manual bulk fallback.
    """

    bucket: str
    dictionary_key: str
    region: str = DEFAULT_REGION
    csv_key: str = DEFAULT_CSV_KEY
    terminology_name: str | None = DEFAULT_TERMINOLOGY_NAME
    role_arn: str | None = None
    default_target_language: str = DEFAULT_TARGET_LANGUAGE
    bulk_content_type: str = DEFAULT_BULK_CONTENT_TYPE
    source_language: str = SOURCE_LANGUAGE

    def __post_init__(self) -> None:
        problems: list[str] = []
        for name in (
            "bucket",
            "dictionary_key",
            "region",
            "csv_key",
            "default_target_language",
            "bulk_content_type",
            "source_language",
        ):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                problems.append(name)
        for name in ("terminology_name", "role_arn"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                problems.append(name)
        if problems:
            raise ValidationError(
                "Invalid translate manager configuration: " + ", ".join(problems),
                details={"fields": problems},
            )

        # Blank optional values behave as unset.
        if not (self.terminology_name or "").strip():
            object.__setattr__(self, "terminology_name", None)
        if not (self.role_arn or "").strip():
            object.__setattr__(self, "role_arn", None)

    @property
    def uses_batch_jobs(self) -> bool:
        return self.role_arn is not None


def build_manager_config(settings: AppSettings) -> ManagerConfig:
    """Translate environment settings into a validated ``ManagerConfig``."""
    missing = [
        alias
        for alias, value in (
            ("TRANSLATE_BUCKET", settings.translate_bucket),
            ("DICTIONARY_JSON_KEY", settings.dictionary_json_key),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise ValidationError(
            "Missing required settings: " + ", ".join(missing),
            details={"fields": missing},
        )

    return ManagerConfig(
        bucket=settings.translate_bucket.strip(),
        dictionary_key=settings.dictionary_json_key.strip(),
        region=settings.aws_region or DEFAULT_REGION,
        csv_key=settings.terminology_csv_key,
        terminology_name=settings.custom_terminology_name,
        role_arn=settings.translate_role_arn,
        default_target_language=settings.default_target_language,
        bulk_content_type=settings.bulk_input_content_type,
    )


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings."""
    return AppSettings()  # type: ignore[call-arg]
