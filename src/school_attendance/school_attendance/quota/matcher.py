from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from ..students.model import CourseRegistration
from .strategies.base import CourseMatchStrategy, MatchTarget
from .strategies.contains_strategy import ContainsStrategy
from .strategies.exact_teacher_strategy import ExactTeacherStrategy
from .strategies.subject_only_strategy import SubjectOnlyStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseMatcher:
    """Ordered chain of match tiers; the first tier that finds a course wins.

    The order decides which registration absorbs a quota delta when a
    student holds several similarly named courses.
    """

    tiers: Tuple[CourseMatchStrategy, ...] = field(
        default_factory=lambda: (ExactTeacherStrategy(), SubjectOnlyStrategy(), ContainsStrategy())
    )

    @classmethod
    def subject_only(cls) -> "CourseMatcher":
        """Replay chain used by reconciliation: teacher ids are not trusted there."""

        return cls(tiers=(SubjectOnlyStrategy(), ContainsStrategy()))

    def find_index(
        self,
        courses: Sequence[CourseRegistration],
        subject_name: Optional[str],
        teacher_id: Optional[object] = None,
    ) -> Optional[int]:
        target = MatchTarget.of(subject_name, teacher_id)
        if not target.subject or not courses:
            return None

        for tier in self.tiers:
            index = tier.find(courses, target)
            if index is not None:
                logger.debug("course match %r -> #%s via %s", subject_name, index, tier.name)
                return index
        return None
