"""Domain error kinds rendered directly by FastAPI"""

from fastapi import HTTPException, status


class AuthenticationRequired(HTTPException):
    def __init__(self, detail: str = "authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """Caller lacks the role or ownership for the operation"""

    def __init__(self, detail: str = "access forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvariantViolation(HTTPException):
    """Wrong state for a transition or an invalid value in the caller's own request"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """A concurrent transition won the race, or an identity already exists"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UpstreamError(HTTPException):
    def __init__(self, detail: str = "internal error", status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(status_code=status_code, detail=detail)
