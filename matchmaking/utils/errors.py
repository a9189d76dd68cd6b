from fastapi import status


class ServiceError(Exception):
    """Base error raised by the service layer; carries the HTTP status it maps to."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed input, e.g. a birthday that is not DD/MM/YYYY."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(ServiceError):
    """No credentials supplied, or credentials that do not match."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredential(Unauthorized):
    """A third-party identity token failed verification."""


class Forbidden(ServiceError):
    """Token present but malformed, signed by another secret, or expired."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class StoreUnavailable(ServiceError):
    """The record store could not be reached or rejected the call."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UploadFailed(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY


class FetchFailed(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY


class DeleteFailed(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
