from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Callable, Mapping, Optional

from ...core.constants import INVALID_CREDENTIALS_MESSAGE
from ...core.enums import AuthProvider
from ...core.exceptions import AuthenticationError
from ..model import Principal
from ..repository import UserRepository
from .base import AuthStrategy

logger = logging.getLogger(__name__)

TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

TokenVerifier = Callable[[str], Mapping[str, Any]]


def fetch_tokeninfo(id_token: str, *, timeout: float = 5.0) -> Mapping[str, Any]:
    """Ask Google to validate an ID token; returns its claims."""

    url = f"{TOKENINFO_URL}?{urllib.parse.urlencode({'id_token': id_token})}"
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        # Google answers 400 for expired or forged tokens.
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE) from e


class GoogleStrategy(AuthStrategy):
    """Google sign-in: verified ID token mapped onto an existing user by email.

    Single-tenant, so unknown Google accounts are not registered.
    """

    provider = AuthProvider.GOOGLE

    def __init__(
        self,
        users: UserRepository,
        *,
        client_id: str,
        verifier: Optional[TokenVerifier] = None,
    ):
        self._users = users
        self._client_id = client_id
        self._verify = verifier or fetch_tokeninfo

    def authenticate(self, credentials: Mapping[str, Any]) -> Principal:
        id_token = str(credentials.get("idToken") or credentials.get("id_token") or "").strip()
        if not id_token:
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        claims = self._verify(id_token)

        if claims.get("aud") != self._client_id:
            logger.warning("Google token rejected: audience mismatch")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        verified = str(claims.get("email_verified", "")).lower() in {"true", "1"}
        email = str(claims.get("email") or "").strip()
        if not email or not verified:
            logger.info("Google token rejected: email missing or unverified")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        user = self._users.get_by_email(email)
        if not user:
            logger.info("Google sign-in rejected: no local account")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        return Principal(
            user_id=user.user_id,
            email=user.email,
            name=user.name or str(claims.get("name") or ""),
            role=user.role,
            provider=self.provider.value,
        )
