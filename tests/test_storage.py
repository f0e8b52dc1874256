from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from translate_manager.core.exceptions import (
    ObjectNotFoundError,
    StorageError,
    ValidationError,
)
from translate_manager.integrations.storage import S3ObjectStorage, parse_s3_uri

from conftest import StubS3Client, make_factory


def test_parse_s3_uri_splits_bucket_and_key() -> None:
    assert parse_s3_uri("s3://other/in/items.json", default_bucket="main") == (
        "other",
        "in/items.json",
    )


def test_parse_s3_uri_treats_bare_value_as_key() -> None:
    assert parse_s3_uri("/in/items.json", default_bucket="main") == ("main", "in/items.json")


@pytest.mark.parametrize("uri", ["", "   ", "s3://", "s3://bucket-only", "s3:///key"])
def test_parse_s3_uri_rejects_invalid_values(uri: str) -> None:
    with pytest.raises(ValidationError):
        parse_s3_uri(uri, default_bucket="main")


@pytest.mark.asyncio
async def test_get_bytes_missing_key_raises_not_found() -> None:
    storage = S3ObjectStorage("main", client_factory=make_factory(StubS3Client()))

    with pytest.raises(ObjectNotFoundError) as excinfo:
        await storage.get_bytes("missing.json")

    assert excinfo.value.bucket == "main"
    assert excinfo.value.key == "missing.json"


@pytest.mark.asyncio
async def test_get_bytes_other_client_errors_raise_storage_error() -> None:
    client = StubS3Client()
    client.fail_on["get_object"] = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}},
        "GetObject",
    )
    storage = S3ObjectStorage("main", client_factory=make_factory(client))

    with pytest.raises(StorageError) as excinfo:
        await storage.get_bytes("dict.json")

    assert not isinstance(excinfo.value, ObjectNotFoundError)


@pytest.mark.asyncio
async def test_put_json_writes_utf8_payload() -> None:
    client = StubS3Client()
    storage = S3ObjectStorage("main", client_factory=make_factory(client))

    await storage.put_json("out.json", [{"original": "tea", "zh": "茶"}], bucket="other")

    body = client.objects[("other", "out.json")]
    assert "茶".encode("utf-8") in body
    assert client.content_types[("other", "out.json")] == "application/json"


@pytest.mark.asyncio
async def test_get_text_rejects_undecodable_content() -> None:
    client = StubS3Client()
    client.objects[("main", "bad.txt")] = b"\xff\xfe\xfa"
    storage = S3ObjectStorage("main", client_factory=make_factory(client))

    with pytest.raises(StorageError):
        await storage.get_text("bad.txt")


@pytest.mark.asyncio
async def test_list_objects_follows_continuation_tokens() -> None:
    client = StubS3Client(page_size=2)
    for key in ("docs/a.txt", "docs/b.txt", "docs/c.txt", "other.txt"):
        client.objects[("main", key)] = b"x"
    storage = S3ObjectStorage("main", client_factory=make_factory(client))

    objects = await storage.list_objects(prefix="docs/")

    assert [obj.key for obj in objects] == ["docs/a.txt", "docs/b.txt", "docs/c.txt"]
    assert len([name for name, _ in client.calls if name == "list_objects_v2"]) == 2
