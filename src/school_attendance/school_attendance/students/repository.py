from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Student directory used by the quota and attendance services.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_ids(self, student_ids: Iterable[str]) -> Sequence[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def set_used_sessions(self, *, student_id: str, course_index: int, used_sessions: int) -> bool:
        """Partial update of a single registration's counter."""

        raise NotImplementedError

    def save(self, student: Student) -> None:
        """Full-document save (registrations and their histories)."""

        raise NotImplementedError
