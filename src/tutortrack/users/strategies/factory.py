from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..repository import UserRepository
from .base import AuthStrategy
from .credentials_strategy import CredentialsStrategy
from .google_strategy import GoogleStrategy, TokenVerifier


@dataclass
class AuthStrategyFactory:
    """Factory Pattern: decide the enabled sign-in strategies from configuration."""

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_verifier: Optional[TokenVerifier] = None

    def build(self, users: UserRepository) -> list[AuthStrategy]:
        strategies: list[AuthStrategy] = [CredentialsStrategy(users)]

        if self.google_client_id and self.google_client_secret:
            strategies.append(
                GoogleStrategy(
                    users,
                    client_id=self.google_client_id,
                    verifier=self.google_verifier,
                )
            )
        return strategies
