"""
Domain Errors

Every failure the booking core reports to its callers. The API layer maps
each class to one HTTP status; the `retryable` flag tells the caller whether
repeating the same request is safe.
"""

from typing import Iterable, List


class DomainError(Exception):
    """Base class for all errors raised by the booking core"""

    code = 'domain_error'
    retryable = False

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> dict:
        return {
            'error': self.code,
            'detail': self.message,
            'retryable': self.retryable,
        }


class ValidationError(DomainError):
    """Malformed input: inverted ranges, past dates, wrong amounts"""

    code = 'validation_error'


class ConflictError(DomainError):
    """
    Requested dates overlap days that are already unavailable

    `conflicting_dates` holds ISO date keys so the caller can offer
    alternatives.
    """

    code = 'conflict'

    def __init__(self, message: str = '', conflicting_dates: Iterable = ()):
        super().__init__(message)
        self.conflicting_dates: List[str] = sorted(
            d if isinstance(d, str) else d.isoformat() for d in conflicting_dates
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['conflicting_dates'] = self.conflicting_dates
        return data


class AuthorizationError(DomainError):
    """The actor is not allowed to perform this transition"""

    code = 'forbidden'


class NotFoundError(DomainError):
    code = 'not_found'


class GatewayError(DomainError):
    """
    Transient payment provider failure (network, timeout, 5xx)

    No state was mutated; retrying the same call is safe.
    """

    code = 'gateway_unavailable'
    retryable = True


class GatewayConfigurationError(GatewayError):
    """
    The provider refused our own credentials

    Nothing was sent for the order, but repeating the call cannot succeed
    until the deployment is fixed.
    """

    code = 'gateway_misconfigured'
    retryable = False


class GatewayRejection(DomainError):
    """
    Terminal decline for one payment order

    The order is dead; the booking stays payable with a fresh order.
    """

    code = 'payment_rejected'
