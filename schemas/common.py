"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 스키마 모음
- Pydantic v2 기준
- 에러 응답 표준: ErrorDetail, ErrorResponse
  (middlewares/error_handler.py 가 내려주는 JSON 형태, 라우터 responses= 문서화에 사용)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, ConfigDict


class ErrorDetail(BaseModel):
    """에러 코드/메시지를 담는 최소 단위"""
    code: str = Field(..., description="에러 식별 코드 (예: NOT_FOUND, SCHEDULE_CONFLICT, STALE_WRITE)")
    message: str = Field(..., description="사람이 읽을 수 있는 에러 메시지")
    details: Optional[Any] = Field(default=None, description="충돌 목록 등 부가 정보")


class ErrorResponse(BaseModel):
    """전역 에러 핸들러에서 내려주는 표준 에러 응답"""
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="응답 생성 시각 (UTC)"
    )
    latency_ms: Optional[int] = Field(
        default=None, ge=0, description="요청 처리에 걸린 시간(ms). 실제 값은 X-Latency-Ms 헤더 참고"
    )

    model_config = ConfigDict(extra="ignore")


# ✅ 라우터 데코레이터에서 공통으로 쓰는 에러 응답 문서
COMMON_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}

CONFLICT_ERRORS = {**COMMON_ERRORS, 409: {"model": ErrorResponse}}
