from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import INVALID_CREDENTIALS_MESSAGE, MIN_PASSWORD_LENGTH
from ..core.enums import AuthProvider, Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Principal, User
from .repository import UserRepository
from .strategies.base import AuthStrategy

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: sign in through one of the enabled strategies."""

    def __init__(self, strategies: Sequence[AuthStrategy]):
        self._strategies = {s.provider: s for s in strategies}

    @property
    def providers(self) -> list[str]:
        return [p.value for p in self._strategies]

    def authenticate(self, credentials: Mapping[str, Any], provider: Optional[str] = None) -> Principal:
        name = str(provider or AuthProvider.CREDENTIALS.value).strip().lower()
        try:
            strategy = self._strategies[AuthProvider(name)]
        except (KeyError, ValueError):
            logger.info("Sign-in rejected: provider %r not enabled", name)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        principal = strategy.authenticate(credentials)
        logger.info("User id=%s signed in via %s", principal.user_id, principal.provider)
        return principal


class UserService:
    """Use case: manage tutor accounts (used by scripts)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_user(self, *, email: str, password: str, name: str, role: Role = Role.TUTOR) -> int:
        email = require_non_empty(email, "Email").lower()
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            name=name,
            role=role,
        )
        logger.info("Created user id=%s (%s)", user_id, role.value)
        return user_id

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get_by_id(user_id)

    def change_password(self, *, email: str, password: str) -> None:
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        user = self._users.get_by_email(require_non_empty(email, "Email"))
        if not user:
            raise ValidationError("User does not exist")
        self._users.update_password(user.user_id, password_hash=generate_password_hash(password))
