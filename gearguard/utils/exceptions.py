"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns.
Each exception may carry a machine-readable ``code`` that the application
error handler renders next to ``detail``.

Usage:
    from gearguard.utils.exceptions import NotFoundError, BadRequestError
    raise NotFoundError("Equipment not found")
    raise BadRequestError("Invalid technician", code="INVALID_TECHNICIAN")
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """코드가 포함된 HTTP 예외 베이스.

    Base HTTP exception carrying an optional machine-readable error code.

    Args:
        status_code: HTTP 상태 코드 (HTTP status code)
        detail: 오류 메시지 (Error message)
        code: 오류 코드 (Machine-readable code, e.g. "INVALID_TEAM")
    """

    def __init__(self, status_code: int, detail: str, code: str | None = None) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.code: str | None = code


class NotFoundError(AppError):
    """404 Not Found 예외 (요청한 리소스를 찾을 수 없을 때 사용).

    Raised when a requested resource (request, equipment, team, etc.) does not exist.
    """

    def __init__(self, detail: str = "Resource not found", code: str | None = "NOT_FOUND") -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail, code)


class DuplicateError(AppError):
    """409 Conflict 예외 (중복 리소스 생성 시도 시 사용).

    Raised when a uniqueness constraint would be violated
    (e.g. duplicate e-mail, serial number or workshop code).
    """

    def __init__(self, detail: str = "Resource already exists", code: str | None = "DUPLICATE") -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail, code)


class ForbiddenError(AppError):
    """403 Forbidden 예외 (권한 부족 시 사용).

    Raised when the authenticated user lacks permission for the operation.
    """

    def __init__(self, detail: str = "Insufficient permissions", code: str | None = "FORBIDDEN") -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail, code)


class UnauthorizedError(AppError):
    """401 Unauthorized 예외 (인증 실패 시 사용)."""

    def __init__(self, detail: str = "Authentication required", code: str | None = "UNAUTHORIZED") -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, code)


class BadRequestError(AppError):
    """400 Bad Request 예외 (잘못된 요청 데이터 시 사용).

    Raised for business-rule validation failures beyond what Pydantic catches
    (e.g. invalid references, invalid state transitions).
    """

    def __init__(self, detail: str = "Bad request", code: str | None = "BAD_REQUEST") -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, code)


class TooManyRequestsError(AppError):
    """429 Too Many Requests 예외 (민감 작업 속도 제한 초과 시 사용)."""

    def __init__(self, detail: str = "Too many requests", code: str | None = "RATE_LIMITED") -> None:
        super().__init__(status.HTTP_429_TOO_MANY_REQUESTS, detail, code)


class CreationFailedError(AppError):
    """409 Conflict 예외 (요청 번호 재시도 소진 시 사용).

    Raised when a maintenance request could not be created because request
    number allocation kept colliding.
    """

    def __init__(
        self,
        detail: str = "정비 요청을 생성할 수 없습니다 (Could not create maintenance request)",
        code: str | None = "CREATION_FAILED",
    ) -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail, code)
