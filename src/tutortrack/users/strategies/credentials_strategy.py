from __future__ import annotations

import logging
from typing import Any, Mapping

from werkzeug.security import check_password_hash

from ...core.constants import INVALID_CREDENTIALS_MESSAGE
from ...core.enums import AuthProvider
from ...core.exceptions import AuthenticationError
from ..model import Principal
from ..repository import UserRepository
from .base import AuthStrategy

logger = logging.getLogger(__name__)


class CredentialsStrategy(AuthStrategy):
    """Email + password checked against the stored salted hash."""

    provider = AuthProvider.CREDENTIALS

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, credentials: Mapping[str, Any]) -> Principal:
        email = str(credentials.get("email") or "").strip()
        password = str(credentials.get("password") or "")
        if not email or not password:
            logger.info("Sign-in rejected: missing email or password")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        user = self._users.get_by_email(email)
        if not user or not user.password_hash:
            logger.info("Sign-in rejected: unknown user")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        try:
            ok = check_password_hash(user.password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Sign-in rejected: wrong password for user id=%s", user.user_id)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        return Principal(
            user_id=user.user_id,
            email=user.email,
            name=user.name,
            role=user.role,
            provider=self.provider.value,
        )
