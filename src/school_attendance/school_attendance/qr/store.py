from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol

from .model import QrSession


class QrSessionStore(Protocol):
    """Where outstanding QR sessions live.

    The default keeps them in process memory; a shared store (e.g. a cache
    server) can implement the same four methods for multi-instance deployments.
    """

    def put(self, session: QrSession) -> None:
        raise NotImplementedError

    def get(self, token: str) -> Optional[QrSession]:
        raise NotImplementedError

    def delete(self, token: str) -> bool:
        raise NotImplementedError

    def sweep_expired(self, now_ms: int) -> int:
        """Drop every session past its expiry; returns how many were removed."""

        raise NotImplementedError


class InMemoryQrSessionStore(QrSessionStore):
    """Process-local store. Sessions are lost on restart."""

    def __init__(self):
        self._sessions: Dict[str, QrSession] = {}
        self._lock = threading.Lock()

    def put(self, session: QrSession) -> None:
        with self._lock:
            self._sessions[session.token] = session

    def get(self, token: str) -> Optional[QrSession]:
        with self._lock:
            return self._sessions.get(token)

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def sweep_expired(self, now_ms: int) -> int:
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.is_expired(now_ms)]
            for token in expired:
                del self._sessions[token]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
