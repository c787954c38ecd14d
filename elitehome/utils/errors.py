# elitehome/utils/errors.py

from fastapi import HTTPException

class BadRequestError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)

class UnauthorizedRequestError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=401, detail=detail)

class ForbiddenError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=403, detail=detail)

class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)

class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)

class InternalServerError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail)

class ServiceUnavailableError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=503, detail=detail)


# ---------------------
# Chat errors
# ---------------------

class ValidationError(BadRequestError):
    """Missing message body or conversation target."""

class AuthorizationError(UnauthorizedRequestError):
    """No authenticated sender or viewer."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail)

class UnresolvedRecipientError(ConflictError):
    """The admin identity is not known yet, so a customer message has no recipient."""

    def __init__(self, detail: str = "No admin account is available to receive messages yet"):
        super().__init__(detail)

class StoreError(ServiceUnavailableError):
    """The document store rejected or failed a read/write."""
