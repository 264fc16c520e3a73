from __future__ import annotations

from typing import Optional, Protocol


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: str) -> Optional[str]:
        """Return the subject name for an id."""

        raise NotImplementedError

    def find_id_by_name(self, name: str) -> Optional[str]:
        raise NotImplementedError
