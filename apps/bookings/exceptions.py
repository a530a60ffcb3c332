"""Translation of reservation errors into API responses.

Registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``. Every error body has
the shape ``{"error": <message>, "code": <stable code>, ...details}``.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import InvalidRangeError

from .domain.errors import ReservationError

logger = logging.getLogger(__name__)


def reservation_exception_handler(exc, context):
    if isinstance(exc, ReservationError):
        view = context.get("view")
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(f"{exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}")
        return Response(exc.to_dict(), status=exc.http_status)

    if isinstance(exc, InvalidRangeError):
        logger.warning(f"Invalid date range: {exc}")
        return Response(
            {"error": str(exc), "code": "validation_error"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "error": "Invalid request data",
            "code": "validation_error",
            "fields": response.data,
        }
    elif isinstance(response.data, dict) and "detail" in response.data:
        detail = response.data["detail"]
        code = getattr(detail, "code", None) or getattr(exc, "default_code", "error")
        response.data = {"error": str(detail), "code": code}
    return response
