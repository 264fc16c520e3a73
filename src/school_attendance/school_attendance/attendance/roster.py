"""Pure roster helpers: merging incoming entries and deriving quota deltas.

Kept free of I/O so the merge and delta rules can be tested without a store.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.constants import DEFAULT_NICKNAME, UNKNOWN_FIRST_NAME, UNKNOWN_LAST_NAME
from ..students.model import Student
from .model import AttendanceEntry
from .status import status_delta


def merge_entries(
    existing: Sequence[AttendanceEntry],
    incoming: Iterable[AttendanceEntry],
) -> List[AttendanceEntry]:
    """Replace entries by student id or append new ones.

    Existing entries missing from ``incoming`` are kept unchanged. An incoming
    entry overrides the stored fields it carries; ``status`` and ``comment``
    always come from the incoming entry.
    """
    merged = list(existing)
    positions: Dict[str, int] = {str(e.student_id): i for i, e in enumerate(merged)}

    for new in incoming:
        sid = str(new.student_id)
        idx = positions.get(sid)
        if idx is None:
            positions[sid] = len(merged)
            merged.append(new)
            continue

        old = merged[idx]
        merged[idx] = replace(
            old,
            first_name=new.first_name or old.first_name,
            last_name=new.last_name or old.last_name,
            nickname=new.nickname if new.nickname is not None else old.nickname,
            leave_type=new.leave_type if new.leave_type is not None else old.leave_type,
            time=new.time if new.time is not None else old.time,
            class_period=new.class_period if new.class_period is not None else old.class_period,
            status=new.status,
            comment=new.comment,
        )
    return merged


def needs_name(entry: AttendanceEntry) -> bool:
    return (
        not entry.first_name
        or entry.first_name == UNKNOWN_FIRST_NAME
        or not entry.last_name
        or entry.last_name == UNKNOWN_LAST_NAME
    )


def fill_names(entries: Sequence[AttendanceEntry], students: Iterable[Student]) -> List[AttendanceEntry]:
    """Fill missing first/last names (and nickname) from student profiles."""

    by_id = {str(s.student_id): s for s in students}
    out: List[AttendanceEntry] = []
    for entry in entries:
        student = by_id.get(str(entry.student_id))
        if not student or not needs_name(entry):
            out.append(entry)
            continue

        first, last = student.name_parts()
        keep_first = entry.first_name and entry.first_name != UNKNOWN_FIRST_NAME
        keep_last = entry.last_name and entry.last_name != UNKNOWN_LAST_NAME
        out.append(
            replace(
                entry,
                first_name=entry.first_name if keep_first else (first or UNKNOWN_FIRST_NAME),
                last_name=entry.last_name if keep_last else (last or UNKNOWN_LAST_NAME),
                nickname=entry.nickname or student.nickname or DEFAULT_NICKNAME,
            )
        )
    return out


def quota_deltas(
    before: Sequence[AttendanceEntry],
    after: Sequence[AttendanceEntry],
) -> List[Tuple[str, int]]:
    """Non-zero (student_id, delta) pairs for every student on the merged roster."""

    old_status = {str(e.student_id): e.status for e in before}
    deltas: List[Tuple[str, int]] = []
    for entry in after:
        sid = str(entry.student_id)
        delta = status_delta(old_status.get(sid), entry.status)
        if delta:
            deltas.append((sid, delta))
    return deltas
