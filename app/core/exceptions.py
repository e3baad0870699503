from fastapi import HTTPException, status
from typing import List


class UdyamException(HTTPException):
    def __init__(self, status_code: int, detail):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundException(UdyamException):
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} with id {identifier} not found"
        )


class UnauthorizedException(UdyamException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail
        )


class ForbiddenException(UdyamException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class FileValidationException(UdyamException):
    """Rejected upload; carries every violated rule, not just the first."""

    def __init__(self, errors: List[str], message: str = "File validation failed"):
        self.errors = errors
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message, "errors": errors}
        )


class ConflictException(UdyamException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class BadRequestException(UdyamException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class LockedException(UdyamException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_423_LOCKED,
            detail=detail
        )


class PersistenceException(UdyamException):
    """Seller and verification records could not be saved together."""

    def __init__(self, detail: str = "Failed to save verification changes"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )
