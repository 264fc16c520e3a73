from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_date
from ..core.exceptions import NotFoundError, ValidationError
from .model import CourseExtension, CourseRegistration, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    def __init__(self, students: StudentRepository, *, clock: Callable[[], datetime] = now_local):
        self._students = students
        self._clock = clock

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(str(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def extend_course(
        self,
        student_id: str,
        course_index: int,
        *,
        new_end_date: str | date,
        sessions_added: int = 0,
        note: str = "",
    ) -> CourseRegistration:
        """Push a registration's end date and top up its session quota."""

        student = self.get_student(student_id)
        if course_index < 0 or course_index >= len(student.courses):
            raise NotFoundError("Course registration not found")

        try:
            added = int(sessions_added or 0)
        except (TypeError, ValueError):
            raise ValidationError("sessionsAdded must be an integer")
        if added < 0:
            raise ValidationError("sessionsAdded must not be negative")

        end = require_date(new_end_date, "newEndDate")
        course = student.courses[course_index]
        extension = CourseExtension(
            extended_at=self._clock(),
            previous_end_date=course.end_date,
            new_end_date=end,
            sessions_added=added,
            note=note or "",
        )
        extended = replace(
            course,
            total_sessions=int(course.total_sessions or 0) + added,
            end_date=end,
            extension_history=course.extension_history + (extension,),
        )

        courses = list(student.courses)
        courses[course_index] = extended
        self._students.save(replace(student, courses=tuple(courses)))
        logger.info("course #%d of student %s extended to %s (+%d)", course_index, student_id, end, added)
        return extended


def registration_to_dict(course: CourseRegistration) -> dict:
    def _day(value: Optional[date]) -> Optional[str]:
        return value.strftime("%Y-%m-%d") if value else None

    return {
        "subject": course.subject,
        "subjectId": course.subject_id,
        "teacherId": course.teacher_id,
        "teacherName": course.teacher_name,
        "totalSessions": course.total_sessions,
        "usedSessions": course.used_sessions,
        "remainingSessions": course.remaining_sessions,
        "startDate": _day(course.start_date),
        "endDate": _day(course.end_date),
        "extensionHistory": [
            {
                "extendedAt": e.extended_at.isoformat(),
                "previousEndDate": _day(e.previous_end_date),
                "newEndDate": _day(e.new_end_date),
                "sessionsAdded": e.sessions_added,
                "note": e.note,
            }
            for e in course.extension_history
        ],
    }
