from __future__ import annotations

import json

import pytest
from botocore.exceptions import ClientError

from translate_manager.core.exceptions import StorageError, ValidationError
from translate_manager.services.dictionary import DictionaryStore
from translate_manager.services.manager import TranslationManager

from conftest import StubS3Client, StubTranslateClient

BUCKET_KEY = ("translate-bucket", "dictionary.json")


def test_add_or_update_twice_keeps_one_entry_with_latest_translation(
    manager: TranslationManager,
) -> None:
    assert manager.add_or_update_entry("hello", "fr", "salut") == "added"
    assert manager.add_or_update_entry("hello", "fr", "bonjour") == "updated"

    entries = manager.dictionary.entries
    assert len(entries) == 1
    assert entries[0].translation == "bonjour"


def test_identity_key_ignores_case(manager: TranslationManager) -> None:
    manager.add_or_update_entry("Hello", "FR", "salut")

    assert manager.add_or_update_entry("hello", "fr", "bonjour") == "updated"
    assert len(manager.dictionary) == 1
    assert manager.dictionary.find("HELLO", "Fr").translation == "bonjour"


def test_same_source_in_two_languages_is_two_entries(manager: TranslationManager) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")
    manager.add_or_update_entry("hello", "de", "hallo")

    assert len(manager.dictionary) == 2


def test_delete_after_add_then_not_found(manager: TranslationManager) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")
    manager.add_or_update_entry("cat", "fr", "chat")

    assert manager.delete_entry("hello", "fr") is True
    assert len(manager.dictionary) == 1
    assert manager.delete_entry("hello", "fr") is False
    assert len(manager.dictionary) == 1


@pytest.mark.parametrize(
    ("source", "language", "translation"),
    [("", "fr", "x"), ("hello", "  ", "x"), ("hello", "fr", ""), (None, "fr", "x")],
)
def test_add_or_update_rejects_blank_fields(
    manager: TranslationManager,
    source,
    language,
    translation,
) -> None:
    with pytest.raises(ValidationError):
        manager.add_or_update_entry(source, language, translation)

    assert len(manager.dictionary) == 0


def test_entries_are_copies(manager: TranslationManager) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")

    manager.dictionary.entries[0].translation = "changed"

    assert manager.dictionary.entries[0].translation == "bonjour"


@pytest.mark.asyncio
async def test_load_missing_key_gives_empty_dictionary(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")

    entries = await manager.load_dictionary()

    assert entries == []
    assert len(manager.dictionary) == 0
    assert manager.errors.records == []


@pytest.mark.asyncio
async def test_save_then_load_reproduces_order_and_content(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    manager.add_or_update_entry("zebra", "fr", "zèbre")
    manager.add_or_update_entry("apple", "de", "Apfel")
    manager.add_or_update_entry("apple", "fr", "pomme")
    before = [entry.model_dump() for entry in manager.dictionary.entries]

    await manager.save_dictionary()
    manager.delete_entry("apple", "de")
    await manager.load_dictionary()

    assert [entry.model_dump() for entry in manager.dictionary.entries] == before
    stored = json.loads(s3_client.objects[BUCKET_KEY].decode("utf-8"))
    assert stored[0] == {"source": "zebra", "language": "fr", "translation": "zèbre"}
    assert s3_client.content_types[BUCKET_KEY] == "application/json"


@pytest.mark.asyncio
async def test_save_then_load_empty_dictionary(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    await manager.save_dictionary()

    assert json.loads(s3_client.objects[BUCKET_KEY]) == []
    assert await manager.load_dictionary() == []


@pytest.mark.asyncio
async def test_load_tolerates_missing_optional_fields(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    s3_client.objects[BUCKET_KEY] = json.dumps(
        [{"source": "hello", "language": "fr"}, {"source": "cat", "translation": None, "extra": 1}]
    ).encode("utf-8")

    entries = await manager.load_dictionary()

    assert [(entry.source, entry.language, entry.translation) for entry in entries] == [
        ("hello", "fr", ""),
        ("cat", "", ""),
    ]


@pytest.mark.asyncio
async def test_load_invalid_json_keeps_previous_state(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")
    s3_client.objects[BUCKET_KEY] = b"{not json"

    with pytest.raises(StorageError) as excinfo:
        await manager.load_dictionary()

    assert str(excinfo.value).startswith("Failed to load dictionary:")
    assert len(manager.dictionary) == 1
    assert manager.errors.records[-1].action == "load_dictionary"


@pytest.mark.asyncio
async def test_load_access_denied_is_fatal(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    s3_client.fail_on["get_object"] = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}},
        "GetObject",
    )

    with pytest.raises(StorageError):
        await manager.load_dictionary()


@pytest.mark.asyncio
async def test_save_failure_leaves_entries_untouched(
    manager: TranslationManager,
    s3_client: StubS3Client,
) -> None:
    manager.add_or_update_entry("hello", "fr", "bonjour")
    s3_client.fail_on["put_object"] = RuntimeError("network down")

    with pytest.raises(StorageError) as excinfo:
        await manager.save_dictionary()

    assert str(excinfo.value) == "Could not save custom dictionary to S3"
    assert len(manager.dictionary) == 1
    assert manager.errors.records[-1].action == "save_dictionary"


@pytest.mark.asyncio
async def test_auto_translate_fills_blank_translations_and_skips_failures(
    manager: TranslationManager,
    translate_client: StubTranslateClient,
    s3_client: StubS3Client,
) -> None:
    s3_client.objects[BUCKET_KEY] = json.dumps(
        [
            {"source": "hello", "language": "fr", "translation": ""},
            {"source": "cat", "language": "xx", "translation": ""},
            {"source": "dog", "language": "fr", "translation": "chien"},
            {"source": "tree", "language": "", "translation": ""},
        ]
    ).encode("utf-8")
    translate_client.answers[("hello", "fr")] = "bonjour"
    translate_client.failing_languages.add("xx")
    await manager.load_dictionary()

    result = await manager.auto_translate_missing()

    assert result.candidates == 3
    assert result.translated == 2
    assert result.failed == 1
    assert result.errors and result.errors[0].startswith("cat (xx)")
    assert manager.dictionary.find("hello", "fr").translation == "bonjour"
    assert manager.dictionary.find("cat", "xx").translation == ""
    assert manager.dictionary.find("dog", "fr").translation == "chien"
    assert manager.dictionary.find("tree", "").translation == "fr:tree"
    assert any(record.critical is False for record in manager.errors.records)


@pytest.mark.asyncio
async def test_auto_translate_requires_translator(manager: TranslationManager) -> None:
    store = DictionaryStore(manager.config, manager.storage)

    with pytest.raises(ValidationError):
        await store.auto_translate_missing()
