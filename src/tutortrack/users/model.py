from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a tutor account.

    Note: plain data object, no DB access here.
    """

    user_id: int
    email: str
    name: str
    password_hash: Optional[str]
    role: Role = Role.TUTOR


@dataclass(frozen=True)
class Principal:
    """What we store into the Flask session after login."""

    user_id: int
    email: str
    name: str
    role: Role
    provider: str
