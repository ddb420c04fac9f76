# clinic_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope:
      {"error": {"code", "message", "details", "request_id"}}
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when a concurrent write could not be completed (e.g. budget number allocation).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class TenantIsolationError(NotFound):
    """
    A referenced row (price table, campaign, vaccine, patient) does not belong to the
    requesting tenant. Always fatal to the operation; surfaced as 404 so foreign ids
    are indistinguishable from missing ones.
    """
    default_detail = "Resource not found for this tenant."
    default_code = "tenant_isolation_violation"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _first_message(value) -> str | None:
    while isinstance(value, (list, tuple)) and value:
        value = value[0]
    if isinstance(value, dict):
        return None
    return str(value) if value else None


def _split_message(data) -> tuple[str, Any]:
    """
    Pick a human message out of DRF error data; the rest goes to details.
      {"detail": m, **rest}  -> m, rest or None
      [m, ...]               -> m, the list
      {"field": [m, ...]}    -> "field: m", the dict
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None

    if isinstance(data, list):
        return _first_message(data) or "Request failed.", data

    if isinstance(data, dict) and data:
        field, value = next(iter(data.items()))
        first = _first_message(value)
        if first:
            return f"{field}: {first}", data

    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    message, details = _split_message(response.data)

    return Response(
        build_error_envelope(
            request=request,
            code=_code_for(exc, http_status),
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
