"""Translation of domain errors into DRF responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    GatewayError,
    GatewayRejection,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    GatewayRejection: status.HTTP_402_PAYMENT_REQUIRED,
    GatewayError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


# Codes whose status differs from their base class
STATUS_BY_CODE = {
    "invalid_transition": status.HTTP_409_CONFLICT,
}


def status_for(exc: DomainError) -> int:
    if exc.code in STATUS_BY_CODE:
        return STATUS_BY_CODE[exc.code]
    for klass in type(exc).__mro__:
        if klass in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[klass]
    return status.HTTP_400_BAD_REQUEST


def domain_error_response(exc: DomainError) -> Response:
    http_status = status_for(exc)
    if http_status >= 500:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")
    return Response(exc.to_dict(), status=http_status)


class DomainErrorMixin:
    """APIView mixin that renders DomainError subclasses with their status."""

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, DomainError):
            return domain_error_response(exc)
        return super().handle_exception(exc)  # type: ignore[misc]
