from __future__ import annotations

import logging
import threading
from typing import Optional

from ..core.constants import DEFAULT_STUDENT_EMAIL, DEFAULT_STUDENT_NAME
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentResolver:
    """Resolve the single tenant's student id, creating the row on first use.

    The id is memoized for the process lifetime. ``invalidate()`` drops the
    memo so the next ``resolve()`` queries the store again.
    """

    def __init__(
        self,
        students: StudentRepository,
        *,
        default_name: Optional[str] = None,
        default_email: Optional[str] = DEFAULT_STUDENT_EMAIL,
    ):
        self._students = students
        self._default_name = (default_name or "").strip() or DEFAULT_STUDENT_NAME
        self._default_email = default_email
        self._cached_id: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def cached_id(self) -> Optional[int]:
        return self._cached_id

    def resolve(self) -> int:
        cached = self._cached_id
        if cached is not None:
            return cached

        with self._lock:
            if self._cached_id is not None:
                return self._cached_id

            student = self._students.get_first()
            if student:
                student_id = student.student_id
            else:
                student_id = self._students.create(name=self._default_name, email=self._default_email)
                logger.info("Created default student %r (id=%s)", self._default_name, student_id)

            self._cached_id = student_id
            return student_id

    def invalidate(self) -> None:
        with self._lock:
            if self._cached_id is not None:
                logger.info("Dropping cached student id %s", self._cached_id)
            self._cached_id = None
