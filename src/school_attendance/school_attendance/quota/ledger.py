from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..students.model import CourseRegistration
from ..students.repository import StudentRepository
from .matcher import CourseMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaResult:
    """Outcome of one quota delta. ``success=False`` is a soft failure, never an error."""

    success: bool
    course_index: Optional[int] = None
    used_sessions: Optional[int] = None
    remaining: Optional[int] = None


def next_used_sessions(current: int, delta: int) -> int:
    """Apply a delta to a counter; quota never goes below zero."""

    return max(0, int(current or 0) + int(delta))


def remaining_after(course: CourseRegistration, used_sessions: int) -> Optional[int]:
    total = int(course.total_sessions or 0)
    if total == 0:
        return None
    return total - int(used_sessions)


class QuotaLedger:
    """Applies +1/-1 session deltas to a student's matching registration.

    Only the matched registration's ``used_sessions`` field is written, so two
    edits touching different courses of the same student do not overwrite
    each other.
    """

    def __init__(self, students: StudentRepository, *, matcher: CourseMatcher | None = None):
        self._students = students
        self._matcher = matcher or CourseMatcher()

    def apply_delta(
        self,
        student_id: str,
        subject_name: Optional[str],
        teacher_id: Optional[object],
        delta: int,
        *,
        matcher: CourseMatcher | None = None,
    ) -> QuotaResult:
        if not student_id or not subject_name or delta == 0:
            return QuotaResult(success=False)

        student = self._students.get_by_id(str(student_id))
        if not student or not student.courses:
            logger.info("quota: no registrations for student %s", student_id)
            return QuotaResult(success=False)

        index = (matcher or self._matcher).find_index(student.courses, subject_name, teacher_id)
        if index is None:
            logger.info("quota: no course match for student %s subject %r", student_id, subject_name)
            return QuotaResult(success=False)

        course = student.courses[index]
        used = next_used_sessions(course.used_sessions, delta)
        self._students.set_used_sessions(student_id=student.student_id, course_index=index, used_sessions=used)
        return QuotaResult(
            success=True,
            course_index=index,
            used_sessions=used,
            remaining=remaining_after(course, used),
        )
