from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

import httpx

from translate_manager.core.config import AppSettings


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ErrorRecord:
    """A fault captured by a public operation before it re-raised."""

    message: str
    action: str
    critical: bool = True
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "action": self.action,
            "critical": self.critical,
            "error": self.error,
            "details": self.details,
            "occurred_at": self.occurred_at.isoformat(),
        }


class ErrorDispatcher:
    """Posts critical error records to a Slack-compatible webhook."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        http_client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        secret = settings.alert_webhook_url
        self._webhook_url = secret.get_secret_value() if secret else None
        self._channel = settings.alert_channel
        self._app_env = settings.app_env
        self._timeout = httpx.Timeout(settings.alert_timeout_seconds)
        self._client_factory = http_client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    async def dispatch(self, records: Sequence[ErrorRecord]) -> None:
        actionable = [record for record in records if record.critical]
        if not actionable or not self._webhook_url:
            return

        payload: dict[str, Any] = {"text": self._format_message(actionable)}
        if self._channel:
            payload["channel"] = self._channel

        async with self._client_factory() as client:
            response = await client.post(self._webhook_url, json=payload)
            response.raise_for_status()

    def _format_message(self, records: Iterable[ErrorRecord]) -> str:
        lines = [f"*Translate Manager errors* in `{self._app_env}`"]
        for record in records:
            suffix = f": {record.error}" if record.error else ""
            lines.append(f":rotating_light: `{record.action}` {record.message}{suffix}")
        return "\n".join(lines)


class ErrorCollector:
    """Keeps recent operation failures and forwards critical ones on flush."""

    def __init__(
        self,
        *,
        dispatcher: ErrorDispatcher | None = None,
        max_records: int = 500,
    ) -> None:
        self._dispatcher = dispatcher
        self._records: deque[ErrorRecord] = deque(maxlen=max_records)
        self._pending: deque[ErrorRecord] = deque(maxlen=max_records)

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    @property
    def pending(self) -> int:
        """Critical records not yet delivered to the webhook."""
        return len(self._pending)

    def add_error(
        self,
        message: str,
        *,
        action: str,
        error: BaseException | None = None,
        critical: bool = True,
        details: dict[str, Any] | None = None,
    ) -> ErrorRecord:
        record = ErrorRecord(
            message=message,
            action=action,
            critical=critical,
            error=str(error) if error is not None else None,
            details=dict(details or {}),
        )
        self._records.append(record)
        if critical:
            self._pending.append(record)
        return record

    def clear(self) -> None:
        self._records.clear()
        self._pending.clear()

    async def flush(self) -> int:
        """Send pending critical records to the dispatcher; return how many were sent."""
        if not self._pending or self._dispatcher is None or not self._dispatcher.enabled:
            self._pending.clear()
            return 0

        batch = list(self._pending)
        self._pending.clear()
        try:
            await self._dispatcher.dispatch(batch)
        except httpx.HTTPError as exc:
            logger.warning("Failed to deliver %s error records", len(batch), exc_info=exc)
            # Oldest records are the first dropped once the queue is full.
            newer = list(self._pending)
            self._pending.clear()
            self._pending.extend(batch + newer)
            return 0

        return len(batch)
