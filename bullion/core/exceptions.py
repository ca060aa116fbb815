"""
Exception classes raised by the services.
Each maps to the HTTP status FastAPI returns for it.
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Raised when input validation fails, before anything is written."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message
        )


class NotFoundError(HTTPException):
    """Raised when a referenced draft, party or stock does not exist."""

    def __init__(self, resource_type: str, resource_id):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} {resource_id} not found",
        )


class ConflictError(HTTPException):
    """Raised when an identifier collision survives every retry."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


class DatabaseError(HTTPException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
        )


class UnauthorizedError(HTTPException):
    """Raised when a user is not authorized to access a resource."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)
