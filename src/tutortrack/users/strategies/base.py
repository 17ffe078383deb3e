from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from ...core.enums import AuthProvider
from ..model import Principal


class AuthStrategy(ABC):
    """Strategy Pattern: one way of turning submitted credentials into a Principal."""

    provider: AuthProvider

    @abstractmethod
    def authenticate(self, credentials: Mapping[str, Any]) -> Principal:
        """Return the principal or raise AuthenticationError."""

        raise NotImplementedError
