from __future__ import annotations

from ...students.model import CourseRegistration
from .base import CourseMatchStrategy, MatchTarget, normalize_subject


class ContainsStrategy(CourseMatchStrategy):
    """Either subject name contains the other."""

    name = "contains"

    def matches(self, course: CourseRegistration, target: MatchTarget) -> bool:
        subject = normalize_subject(course.subject)
        if not subject:
            return False
        return subject in target.subject or target.subject in subject
