from __future__ import annotations

import logging
from typing import Any, Dict, Protocol

import requests

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Fire-and-forget event emission. Implementations must not raise."""

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotificationSink:
    """Default sink: events only go to the application log."""

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        logger.info("event %s %s", event, payload)


class WebhookNotificationSink:
    """POST events as JSON to a configured webhook URL."""

    def __init__(self, url: str, *, timeout: float = 5.0, session: requests.Session | None = None):
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        try:
            resp = self._session.post(self._url, json={"event": event, "data": payload}, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("webhook %s failed for %s: %s", self._url, event, e)
