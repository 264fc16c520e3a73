"""Status normalization and the deductible-status classifier.

All status strings coming from clients or legacy rows go through
``normalize_status`` so English and Thai labels end up on the same canonical
value before any quota decision is made.
"""

from __future__ import annotations

from ..core.enums import AttendanceStatus

DEDUCTIBLE_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


def normalize_status(value: object) -> str:
    """Canonical label for a stored status.

    Known labels map onto ``AttendanceStatus`` values; anything else is
    lowercased and title-cased so that repeated runs are stable.
    """
    status = AttendanceStatus.parse(value)
    if status is not None:
        return status.value

    lower = str(value or "").lower()
    return lower[:1].upper() + lower[1:]


def is_deductible(value: object) -> bool:
    """True when the status consumes one session of quota."""

    return AttendanceStatus.parse(value) in DEDUCTIBLE_STATUSES


def status_delta(old_status: object, new_status: object) -> int:
    """Quota delta for a roster entry moving from ``old_status`` to ``new_status``.

    ``None`` stands for "no entry" on either side.
    """
    was = old_status is not None and is_deductible(old_status)
    now = new_status is not None and is_deductible(new_status)
    if now and not was:
        return 1
    if was and not now:
        return -1
    return 0
