from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..common.datetime_utils import now_millis
from .store import QrSessionStore

logger = logging.getLogger(__name__)


class QrSessionSweeper:
    """Daemon thread that periodically removes expired QR sessions."""

    def __init__(
        self,
        store: QrSessionStore,
        *,
        interval_seconds: float,
        clock: Callable[[], int] = now_millis,
    ):
        self._store = store
        self._interval = float(interval_seconds)
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> int:
        removed = self._store.sweep_expired(self._clock())
        if removed:
            logger.debug("swept %d expired QR sessions", removed)
        return removed

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.sweep_once()
            except Exception:
                logger.exception("QR session sweep failed")

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="QrSessionSweeper")
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
