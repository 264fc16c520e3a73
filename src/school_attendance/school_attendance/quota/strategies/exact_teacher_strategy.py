from __future__ import annotations

from ...students.model import CourseRegistration
from .base import CourseMatchStrategy, MatchTarget, normalize_subject


class ExactTeacherStrategy(CourseMatchStrategy):
    """Same subject, same teacher, and quota not yet used up.

    Calls without a teacher id skip this tier.
    """

    name = "exact_teacher"

    def matches(self, course: CourseRegistration, target: MatchTarget) -> bool:
        if normalize_subject(course.subject) != target.subject:
            return False
        if not target.teacher_id or str(course.teacher_id or "") != target.teacher_id:
            return False
        total = int(course.total_sessions or 0)
        return total == 0 or int(course.used_sessions or 0) < total
