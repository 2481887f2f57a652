"""
services/errors.py

- 서비스 계층에서 던지는 도메인 예외
- middlewares/error_handler.py 가 status_code / code 를 읽어 표준 ErrorResponse 로 변환
"""

from typing import Any, Optional


class ServiceError(Exception):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class PermissionDeniedError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class ValidationFailedError(ServiceError):
    status_code = 400
    code = "VALIDATION_FAILED"


class ScheduleConflictError(ServiceError):
    status_code = 409
    code = "SCHEDULE_CONFLICT"


class StaleWriteError(ServiceError):
    """낙관적 잠금 실패 (동시에 다른 요청이 먼저 반영됨)"""
    status_code = 409
    code = "STALE_WRITE"
