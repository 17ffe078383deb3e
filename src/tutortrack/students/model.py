from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """The single tenant being tutored."""

    student_id: int
    name: str
    email: Optional[str] = None
