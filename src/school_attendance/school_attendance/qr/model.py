from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import CheckInOutcome


@dataclass(frozen=True)
class QrSession:
    """A short-lived check-in window minted by a teacher.

    ``expires_at`` is an absolute timestamp in epoch milliseconds.
    """

    token: str
    teacher_id: str
    subject_id: str
    subject_name: str
    date: str
    time: str
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at


@dataclass(frozen=True)
class QrToken:
    token: str
    expires_at: int

    def to_dict(self) -> dict:
        return {"token": self.token, "expiresAt": self.expires_at}


@dataclass(frozen=True)
class CheckInResult:
    outcome: CheckInOutcome
    message: str
    status: Optional[str] = None
    quota_deducted: bool = False
    remaining_quota: Optional[int] = None
    warning: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "status": self.outcome.value,
            "message": self.message,
            "quotaDeducted": self.quota_deducted,
        }
        if self.status is not None:
            out["attendanceStatus"] = self.status
        if self.remaining_quota is not None:
            out["remainingQuota"] = self.remaining_quota
        if self.warning:
            out["warning"] = self.warning
        return out
