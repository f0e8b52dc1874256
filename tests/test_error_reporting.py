from __future__ import annotations

import httpx
import pytest

from translate_manager.core.config import AppSettings
from translate_manager.services.error_reporting import ErrorCollector, ErrorDispatcher

from conftest import RecordingClientFactory


def _dispatcher(factory: RecordingClientFactory, **overrides: str) -> ErrorDispatcher:
    settings = AppSettings(
        APP_ENV="prod",
        ALERT_WEBHOOK_URL="https://hooks.test/errors",
        **overrides,
    )
    return ErrorDispatcher(settings, http_client_factory=factory)


def test_collector_keeps_records_with_string_errors() -> None:
    collector = ErrorCollector()

    record = collector.add_error(
        "Failed to save dictionary to S3",
        action="save_dictionary",
        error=RuntimeError("timeout"),
        details={"key": "dict.json"},
    )

    assert collector.records == [record]
    payload = record.as_dict()
    assert payload["error"] == "timeout"
    assert payload["details"] == {"key": "dict.json"}
    assert payload["critical"] is True


def test_collector_is_bounded() -> None:
    collector = ErrorCollector(max_records=2)

    for index in range(3):
        collector.add_error(f"failure {index}", action="translate_text")

    assert [record.message for record in collector.records] == ["failure 1", "failure 2"]


@pytest.mark.asyncio
async def test_flush_posts_only_critical_records() -> None:
    factory = RecordingClientFactory()
    collector = ErrorCollector(dispatcher=_dispatcher(factory, ALERT_CHANNEL="translate-ops"))
    collector.add_error("Translation failed", action="translate_text", error=ValueError("boom"))
    collector.add_error("Skipped one item", action="manual_translate", critical=False)

    sent = await collector.flush()

    assert sent == 1
    request = factory.clients[0].requests[0]
    assert request["url"] == "https://hooks.test/errors"
    assert request["json"]["channel"] == "translate-ops"
    assert "`translate_text` Translation failed: boom" in request["json"]["text"]
    assert "manual_translate" not in request["json"]["text"]
    assert request["response"].raise_for_status_called is True

    assert await collector.flush() == 0


@pytest.mark.asyncio
async def test_flush_without_webhook_drops_pending() -> None:
    factory = RecordingClientFactory()
    dispatcher = ErrorDispatcher(AppSettings(), http_client_factory=factory)
    collector = ErrorCollector(dispatcher=dispatcher)
    collector.add_error("Translation failed", action="translate_text")

    assert dispatcher.enabled is False
    assert await collector.flush() == 0
    assert factory.clients == []
    assert len(collector.records) == 1


@pytest.mark.asyncio
async def test_flush_keeps_pending_when_webhook_fails() -> None:
    factory = RecordingClientFactory(fail=True)
    collector = ErrorCollector(dispatcher=_dispatcher(factory))
    collector.add_error("Translation failed", action="translate_text")

    assert await collector.flush() == 0

    factory.fail = False
    assert await collector.flush() == 1


def test_pending_queue_is_bounded_while_undelivered() -> None:
    collector = ErrorCollector(dispatcher=_dispatcher(RecordingClientFactory()), max_records=10)

    for index in range(1000):
        collector.add_error(f"failure {index}", action="translate_text")

    assert collector.pending == 10
    assert len(collector.records) == 10


@pytest.mark.asyncio
async def test_failed_delivery_keeps_newest_records_within_bound() -> None:
    factory = RecordingClientFactory(fail=True)
    collector = ErrorCollector(dispatcher=_dispatcher(factory), max_records=3)
    for index in range(3):
        collector.add_error(f"failure {index}", action="translate_text")

    assert await collector.flush() == 0
    collector.add_error("failure 3", action="translate_text")

    assert collector.pending == 3
    factory.fail = False
    assert await collector.flush() == 3
    text = factory.clients[-1].requests[0]["json"]["text"]
    assert "failure 0" not in text
    assert "failure 3" in text


@pytest.mark.asyncio
async def test_default_client_uses_configured_timeout() -> None:
    dispatcher = ErrorDispatcher(
        AppSettings(ALERT_WEBHOOK_URL="https://hooks.test/errors", ALERT_TIMEOUT_SECONDS="2.5")
    )

    async with dispatcher._default_client() as client:
        assert client.timeout == httpx.Timeout(2.5)
