"""Errors raised by the contract document services."""
from fastapi import status


class DocumentError(Exception):
    """Base error carrying the HTTP status the router should answer with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Document error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UnauthorizedError(DocumentError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class BadRequestError(DocumentError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Missing contract id"


class ForbiddenError(DocumentError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFoundError(DocumentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class TemplateUnavailableError(Exception):
    """The contract template could not be loaded; callers fall back to the legacy layout."""
