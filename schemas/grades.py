from pydantic import BaseModel, Field
from typing import Optional


# ✅ 제출물 채점 요청
# score 가 None 이면 채점 취소 (내용 없는 제출은 삭제 처리)
class ScoreUpdate(BaseModel):
    score: Optional[float] = Field(default=None, ge=0, le=100, description="0~100 점수, null 이면 채점 취소")
