from __future__ import annotations

import logging
import math
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    DomainError,
    DuplicateAttendanceError,
    NoEnrollmentsError,
    NoMatchError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_payload(e: DomainError) -> tuple[dict[str, Any], int]:
    """Map a domain error to ``(json, status)``.

    Only StorageError is flagged retryable; every other kind means the request
    itself cannot succeed as given.
    """

    payload: dict[str, Any] = {"message": str(e), "retryable": e.retryable}

    if isinstance(e, ValidationError):
        payload["error"] = "validation_error"
        return payload, 400

    if isinstance(e, NotFoundError):
        payload["error"] = "not_found"
        return payload, 404

    if isinstance(e, NoEnrollmentsError):
        payload["error"] = "no_enrollments"
        payload["hint"] = "Please enroll students first before marking attendance"
        return payload, 404

    if isinstance(e, DuplicateAttendanceError):
        payload["error"] = "duplicate"
        payload["existingRecord"] = e.existing.to_dict() if e.existing else None
        if e.student is not None:
            payload["student"] = e.student.summary()
        return payload, 409

    if isinstance(e, NoMatchError):
        payload["error"] = "no_match"
        payload["bestDistance"] = finite_or_none(e.best_distance)
        payload["threshold"] = e.threshold
        return payload, 422

    if isinstance(e, StorageError):
        payload["error"] = "storage_error"
        return payload, 503

    payload["error"] = "domain_error"
    return payload, 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        payload, status = error_payload(e)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e)
        return jsonify(payload), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"message": e.description, "error": e.name.lower().replace(" ", "_")}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error", "error": "internal_error"}), 500
