# app/services/notifications.py
"""
Best-effort booking notifications.

Bookings are committed before anything here runs; a failed notification is
logged and dropped; there is no retry queue.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional, Set

import httpx

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)

NOTIFY_PATH = "/api/bookings/notify"


def build_notification_payload(
    *,
    booking_id: int,
    workshop_id: int,
    customer_id: int,
    customer_email: Optional[str],
    scheduled_at: datetime,
) -> dict[str, Any]:
    return {
        "bookingId": booking_id,
        "workshopId": workshop_id,
        "customerId": customer_id,
        "customerEmail": customer_email,
        "scheduledAt": scheduled_at.isoformat(),
    }


class BookingNotifier:
    """Posts booking notifications from detached tasks."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingNotifier":
        return cls(settings.BOOKING_SERVICE_URL, timeout=settings.NOTIFY_TIMEOUT_SECONDS)

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def notify(self, payload: dict[str, Any]) -> bool:
        if not self.enabled:
            logger.debug("booking_notify_skipped", reason="no_service_url",
                         booking_id=payload.get("bookingId"))
            return False
        try:
            response = await self._client.post(f"{self.base_url}{NOTIFY_PATH}", json=payload)
            response.raise_for_status()
        except Exception as e:
            logger.warning("booking_notify_failed", booking_id=payload.get("bookingId"),
                           error=str(e), error_type=type(e).__name__)
            return False

        logger.info("booking_notified", booking_id=payload.get("bookingId"),
                    status_code=response.status_code)
        return True

    def dispatch(self, payload: dict[str, Any]) -> asyncio.Task:
        """Schedule `notify` without waiting for it."""
        task = asyncio.create_task(self.notify(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight notifications (used at shutdown and in tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        await self._client.aclose()
