from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    def get_first(self) -> Optional[Student]:
        """Lowest-id student row, if any."""

        raise NotImplementedError

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def create(self, *, name: str, email: Optional[str]) -> int:
        raise NotImplementedError
