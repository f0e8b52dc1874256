from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Callable

import httpx
import pytest


def _ensure_local_package_on_path() -> None:
    root_dir = Path(__file__).resolve().parents[1]
    if str(root_dir) not in sys.path:
        sys.path.insert(0, str(root_dir))


_ensure_local_package_on_path()

from botocore.exceptions import ClientError  # noqa: E402

from translate_manager.core.config import ManagerConfig  # noqa: E402
from translate_manager.services.error_reporting import ErrorCollector  # noqa: E402
from translate_manager.services.manager import TranslationManager  # noqa: E402


class StubBody:
    def __init__(self, data: bytes) -> None:
        self._data = data

    async def read(self) -> bytes:
        return self._data


class StubS3Client:
    """In-memory stand-in for the subset of the S3 API the storage layer calls."""

    def __init__(self, page_size: int = 1000) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.page_size = page_size
        self.fail_on: dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        error = self.fail_on.get(operation)
        if error is not None:
            raise error

    async def get_object(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("get_object", kwargs))
        self._maybe_fail("get_object")
        location = (kwargs["Bucket"], kwargs["Key"])
        if location not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": StubBody(self.objects[location])}

    async def put_object(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("put_object", kwargs))
        self._maybe_fail("put_object")
        location = (kwargs["Bucket"], kwargs["Key"])
        self.objects[location] = kwargs["Body"]
        self.content_types[location] = kwargs.get("ContentType", "")
        return {"ETag": '"stub"'}

    async def list_objects_v2(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("list_objects_v2", kwargs))
        self._maybe_fail("list_objects_v2")
        prefix = kwargs.get("Prefix", "")
        keys = sorted(
            key for bucket, key in self.objects if bucket == kwargs["Bucket"] and key.startswith(prefix)
        )
        start = int(kwargs.get("ContinuationToken") or 0)
        page = keys[start : start + self.page_size]
        response: dict[str, Any] = {
            "Contents": [
                {
                    "Key": key,
                    "Size": len(self.objects[(kwargs["Bucket"], key)]),
                    "LastModified": datetime(2025, 1, 1, tzinfo=timezone.utc),
                }
                for key in page
            ],
            "IsTruncated": start + self.page_size < len(keys),
        }
        if response["IsTruncated"]:
            response["NextContinuationToken"] = str(start + self.page_size)
        return response


class StubTranslateClient:
    """Fake Amazon Translate: returns ``"<lang>:<text>"`` unless a canned answer exists."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.answers: dict[tuple[str, str], str] = {}
        self.failing_languages: set[str] = set()
        self.fail_on: dict[str, Exception] = {}

    async def translate_text(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("translate_text", kwargs))
        error = self.fail_on.get("translate_text")
        if error is not None:
            raise error
        language = kwargs["TargetLanguageCode"]
        if language in self.failing_languages:
            raise ClientError(
                {"Error": {"Code": "UnsupportedLanguagePairException", "Message": "nope"}},
                "TranslateText",
            )
        text = kwargs["Text"]
        return {"TranslatedText": self.answers.get((text, language), f"{language}:{text}")}

    async def start_text_translation_job(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("start_text_translation_job", kwargs))
        error = self.fail_on.get("start_text_translation_job")
        if error is not None:
            raise error
        return {"JobId": "job-123", "JobStatus": "SUBMITTED"}

    async def import_terminology(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("import_terminology", kwargs))
        error = self.fail_on.get("import_terminology")
        if error is not None:
            raise error
        rows = kwargs["TerminologyData"]["File"].decode("utf-8").splitlines()
        return {
            "TerminologyProperties": {
                "Name": kwargs["Name"],
                "TermCount": max(len(rows) - 1, 0),
            }
        }

    def calls_for(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]


class StubResponse:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.raise_for_status_called = False

    def raise_for_status(self) -> None:
        self.raise_for_status_called = True
        if self.fail:
            request = httpx.Request("POST", "https://hooks.test/errors")
            raise httpx.HTTPStatusError(
                "server error",
                request=request,
                response=httpx.Response(500, request=request),
            )


class RecordingClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.requests: list[dict[str, object]] = []

    async def __aenter__(self) -> RecordingClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def post(self, url: str, *, json: dict[str, object]) -> StubResponse:
        response = StubResponse(fail=self.fail)
        self.requests.append({"url": url, "json": json, "response": response})
        return response


class RecordingClientFactory:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.clients: list[RecordingClient] = []

    def __call__(self) -> RecordingClient:
        client = RecordingClient(fail=self.fail)
        self.clients.append(client)
        return client


def make_factory(client: Any) -> Callable[[], Any]:
    @asynccontextmanager
    async def factory() -> AsyncIterator[Any]:
        yield client

    return factory


@pytest.fixture()
def s3_client() -> StubS3Client:
    return StubS3Client()


@pytest.fixture()
def translate_client() -> StubTranslateClient:
    return StubTranslateClient()


@pytest.fixture()
def manager_config() -> ManagerConfig:
    return ManagerConfig(bucket="translate-bucket", dictionary_key="dictionary.json")


@pytest.fixture()
def manager(
    manager_config: ManagerConfig,
    s3_client: StubS3Client,
    translate_client: StubTranslateClient,
) -> TranslationManager:
    return TranslationManager(
        manager_config,
        s3_client_factory=make_factory(s3_client),
        translate_client_factory=make_factory(translate_client),
        errors=ErrorCollector(),
    )
