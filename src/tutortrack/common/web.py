from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.exceptions import AuthorizationError


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def login_required(view):
    @wraps(view)
    def decorated_function(*args, **kwargs):
        if "user_id" not in session:
            raise AuthorizationError("Unauthorized")
        return view(*args, **kwargs)

    return decorated_function


def json_body() -> dict[str, Any]:
    """JSON body, falling back to form fields; never None."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()
