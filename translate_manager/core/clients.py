from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

import aioboto3
from pydantic import SecretStr

from translate_manager.core.config import DEFAULT_REGION, AppSettings


ClientFactory = Callable[[], AbstractAsyncContextManager[Any]]


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value else None


def build_client_kwargs(settings: AppSettings, service_name: str) -> dict[str, Any]:
    """Resolve region and credentials for an AWS service client.

    Service-specific keys (``S3_*`` / ``TRANSLATE_*``) win over the shared
    ``AWS_*`` pair; when neither is set boto's default credential chain applies.
    """
    client_kwargs: dict[str, Any] = {"region_name": settings.aws_region or DEFAULT_REGION}

    if service_name == "s3":
        key_id, secret = settings.s3_access_key_id, settings.s3_secret_access_key
    elif service_name == "translate":
        key_id, secret = settings.translate_access_key_id, settings.translate_secret_access_key
    else:
        key_id, secret = None, None

    if not (key_id and secret):
        key_id, secret = settings.aws_access_key_id, settings.aws_secret_access_key

    if key_id and secret:
        client_kwargs["aws_access_key_id"] = _secret(key_id)
        client_kwargs["aws_secret_access_key"] = _secret(secret)
    return client_kwargs


def build_client_factory(settings: AppSettings, service_name: str) -> ClientFactory:
    """Return a factory yielding an aioboto3 client for ``service_name``."""
    client_kwargs = build_client_kwargs(settings, service_name)
    session = aioboto3.Session()

    @asynccontextmanager
    async def factory() -> AsyncIterator[Any]:
        async with session.client(service_name, **client_kwargs) as client:
            yield client

    return factory
