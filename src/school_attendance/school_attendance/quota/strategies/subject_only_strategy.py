from __future__ import annotations

from ...students.model import CourseRegistration
from .base import CourseMatchStrategy, MatchTarget, normalize_subject


class SubjectOnlyStrategy(CourseMatchStrategy):
    """Same subject name, teacher ignored (legacy registrations rarely carry one)."""

    name = "subject_only"

    def matches(self, course: CourseRegistration, target: MatchTarget) -> bool:
        return normalize_subject(course.subject) == target.subject
