from __future__ import annotations

import logging

from flask import jsonify

from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ExpiredError, 410),
    (AuthorizationError, 403),
    (ValidationError, 400),
)


def status_code_for(error: DomainError) -> int:
    for kind, code in _STATUS_CODES:
        if isinstance(error, kind):
            return code
    return 400


_NO_DATA = object()


def ok(data=_NO_DATA, *, message: str | None = None, status: int = 200):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not _NO_DATA:
        body["data"] = data
    return jsonify(body), status


def error(e: DomainError):
    code = status_code_for(e)
    logger.info("request rejected (%d): %s", code, e)
    return jsonify({"success": False, "message": str(e)}), code


def server_error(e: Exception):
    logger.exception("unhandled error: %s", e)
    return jsonify({"success": False, "message": "Internal server error"}), 500
