from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvoiceEligibilityError,
    NotFoundError,
    ReferenceExhaustedError,
    ValidationError,
)

log = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ReferenceExhaustedError, 503),
)


def status_for(exc: DomainError) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"message": "Not authenticated"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"message": "Not authenticated"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"message": "Admin access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    return Role(session.get("role"))


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        body = {"message": str(exc)}
        if isinstance(exc, InvoiceEligibilityError):
            body.update(exc.to_dict())
        if status >= 500:
            log.error("%s %s failed: %s", request.method, request.path, exc)
        return jsonify(body), status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            if exc.code is None or exc.code < 400:
                return exc
            return jsonify({"message": exc.description}), exc.code
        log.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500
