from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ...students.model import CourseRegistration


def normalize_subject(value: Optional[str]) -> str:
    return (value or "").strip().lower()


@dataclass(frozen=True)
class MatchTarget:
    subject: str
    teacher_id: str = ""

    @classmethod
    def of(cls, subject_name: Optional[str], teacher_id: Optional[object] = None) -> "MatchTarget":
        return cls(subject=normalize_subject(subject_name), teacher_id=str(teacher_id or ""))


class CourseMatchStrategy(ABC):
    """Strategy Pattern: one tier of the registration lookup."""

    name: str = "base"

    def find(self, courses: Sequence[CourseRegistration], target: MatchTarget) -> Optional[int]:
        for index, course in enumerate(courses):
            if self.matches(course, target):
                return index
        return None

    @abstractmethod
    def matches(self, course: CourseRegistration, target: MatchTarget) -> bool:
        raise NotImplementedError
