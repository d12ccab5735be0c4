"""Failure taxonomy shared by the review services.

Every caller-facing error is recoverable or final by kind, never by message:
``ValidationError`` and ``LimitExceededError`` can be fixed by resubmitting,
``NotFoundError`` and ``AuthorizationError`` are final. ``ConsistencyFailure``
is internal: it always aborts the enclosing mutation and is reported to the
caller only as a generic internal failure.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        missing_fields: list[str] | None = None,
        out_of_range_fields: list[str] | None = None,
    ):
        super().__init__(message)
        self.missing_fields = missing_fields or []
        self.out_of_range_fields = out_of_range_fields or []


class NotFoundError(DomainError):
    status_code = 404


class AuthorizationError(DomainError):
    status_code = 403


class LimitExceededError(DomainError):
    status_code = 400


class ConsistencyFailure(DomainError):
    status_code = 500
