"""
Domain errors raised by services and mapped to HTTP responses in wifidash.main.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed input; raised before any state change."""

    status_code = 422

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    status_code = 404


class ForbiddenError(DomainError):
    status_code = 403


class InvalidStateError(DomainError):
    """Requested transition is not allowed from the current status."""

    status_code = 400


class InfrastructureError(DomainError):
    status_code = 503
