from __future__ import annotations

import json
import logging
from typing import Any

from botocore.exceptions import ClientError

from translate_manager.core.clients import ClientFactory
from translate_manager.core.exceptions import (
    ObjectNotFoundError,
    StorageError,
    ValidationError,
)
from translate_manager.schemas.storage import StoredObject


logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def parse_s3_uri(uri: str, *, default_bucket: str) -> tuple[str, str]:
    """Split ``s3://bucket/key`` into its parts.

    A value without the ``s3://`` scheme is treated as a key inside
    ``default_bucket``.
    """
    value = (uri or "").strip()
    if not value:
        raise ValidationError("Storage location must be a non-empty string")

    if not value.startswith("s3://"):
        return default_bucket, value.lstrip("/")

    bucket, _, key = value[len("s3://"):].partition("/")
    if not bucket or not key:
        raise ValidationError(
            f"Storage location {uri!r} must look like s3://bucket/key",
            details={"uri": uri},
        )
    return bucket, key


def _is_missing_key(exc: ClientError) -> bool:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return code in _MISSING_KEY_CODES


class S3ObjectStorage:
    """Fetch, store and list objects in an S3 bucket."""

    def __init__(self, bucket: str, *, client_factory: ClientFactory):
        self._bucket = bucket
        self._client_factory = client_factory

    @property
    def bucket(self) -> str:
        return self._bucket

    async def get_bytes(self, key: str, *, bucket: str | None = None) -> bytes:
        target_bucket = bucket or self._bucket
        try:
            async with self._client_factory() as client:
                response = await client.get_object(Bucket=target_bucket, Key=key)
                body = await response["Body"].read()
        except ClientError as exc:
            if _is_missing_key(exc):
                raise ObjectNotFoundError(target_bucket, key) from exc
            raise StorageError(
                f"Failed to read s3://{target_bucket}/{key}: {exc}",
                details={"bucket": target_bucket, "key": key},
            ) from exc
        except Exception as exc:
            raise StorageError(
                f"Failed to read s3://{target_bucket}/{key}: {exc}",
                details={"bucket": target_bucket, "key": key},
            ) from exc

        logger.debug("Fetched %s bytes from s3://%s/%s", len(body), target_bucket, key)
        return body

    async def get_text(
        self,
        key: str,
        *,
        bucket: str | None = None,
        encoding: str = "utf-8",
    ) -> str:
        body = await self.get_bytes(key, bucket=bucket)
        try:
            return body.decode(encoding)
        except UnicodeDecodeError as exc:
            raise StorageError(
                f"Object s3://{bucket or self._bucket}/{key} is not valid {encoding} text",
                details={"bucket": bucket or self._bucket, "key": key},
            ) from exc

    async def put_object(
        self,
        key: str,
        body: bytes | str,
        *,
        content_type: str,
        bucket: str | None = None,
    ) -> dict[str, Any]:
        target_bucket = bucket or self._bucket
        payload = body.encode("utf-8") if isinstance(body, str) else body
        try:
            async with self._client_factory() as client:
                response = await client.put_object(
                    Bucket=target_bucket,
                    Key=key,
                    Body=payload,
                    ContentType=content_type,
                )
        except Exception as exc:
            raise StorageError(
                f"Failed to write s3://{target_bucket}/{key}: {exc}",
                details={"bucket": target_bucket, "key": key},
            ) from exc

        logger.info("Persisted %s bytes to s3://%s/%s", len(payload), target_bucket, key)
        return response or {}

    async def put_json(
        self,
        key: str,
        payload: Any,
        *,
        bucket: str | None = None,
    ) -> dict[str, Any]:
        body = json.dumps(payload, ensure_ascii=False, indent=2)
        return await self.put_object(
            key,
            body,
            content_type="application/json",
            bucket=bucket,
        )

    async def list_objects(
        self,
        *,
        prefix: str | None = None,
        bucket: str | None = None,
    ) -> list[StoredObject]:
        target_bucket = bucket or self._bucket
        objects: list[StoredObject] = []
        try:
            async with self._client_factory() as client:
                continuation_token: str | None = None
                while True:
                    params: dict[str, Any] = {"Bucket": target_bucket}
                    if prefix:
                        params["Prefix"] = prefix
                    if continuation_token:
                        params["ContinuationToken"] = continuation_token

                    response = await client.list_objects_v2(**params)
                    for obj in response.get("Contents", []):
                        key = obj.get("Key")
                        if not key:
                            continue
                        objects.append(
                            StoredObject(
                                key=key,
                                size=int(obj.get("Size") or 0),
                                last_modified=obj.get("LastModified"),
                            )
                        )

                    if not response.get("IsTruncated"):
                        break
                    continuation_token = response.get("NextContinuationToken")
        except Exception as exc:
            raise StorageError(
                f"Failed to list s3://{target_bucket}/{prefix or ''}: {exc}",
                details={"bucket": target_bucket, "prefix": prefix},
            ) from exc

        logger.debug("Listed %s objects in s3://%s/%s", len(objects), target_bucket, prefix or "")
        return objects
