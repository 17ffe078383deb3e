from __future__ import annotations

import logging

from flask import Flask, jsonify, session

from ..common.web import error_response, json_body
from ..container import Container
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/providers", methods=["GET"], endpoint="auth_providers")
    def auth_providers():
        return jsonify({"providers": container.auth_service.providers})

    @app.route("/auth/signin", methods=["POST"], endpoint="signin")
    def signin():
        data = json_body()
        try:
            principal = container.auth_service.authenticate(data, provider=data.get("provider"))
        except AuthenticationError as e:
            return error_response(str(e), 401)
        except Exception:
            logger.exception("Error during sign-in")
            return error_response("Failed to sign in", 500)

        session.clear()
        session.permanent = bool(data.get("remember", True))
        session["user_id"] = principal.user_id
        session["email"] = principal.email
        session["name"] = principal.name
        session["role"] = principal.role.value
        session["provider"] = principal.provider

        return jsonify({"user": {"id": principal.user_id, "email": principal.email, "name": principal.name}})

    @app.route("/auth/signout", methods=["POST"], endpoint="signout")
    def signout():
        session.clear()
        return jsonify({"message": "Signed out"})

    @app.route("/auth/session", methods=["GET"], endpoint="auth_session")
    def auth_session():
        if "user_id" not in session:
            return jsonify({"user": None})

        # Accounts can be removed while a signed cookie is still valid.
        user = container.user_service.get_user(session["user_id"])
        if user is None:
            session.clear()
            return jsonify({"user": None})

        return jsonify(
            {
                "user": {
                    "id": user.user_id,
                    "email": user.email,
                    "name": user.name,
                    "role": user.role.value,
                }
            }
        )
