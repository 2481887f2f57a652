from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from models.enums import AttendanceStatus


# ✅ 학생 1명의 출결 입력값
class AttendanceRecordIn(BaseModel):
    student_id: int                                  # 학생 ID
    status: AttendanceStatus                         # 출결 상태 (PRESENT/ABSENT/EXCUSED/...)
    excuse_reason: Optional[str] = None              # 사유 (EXCUSED 등)


# ✅ 세션(날짜 + 교시) 출결 저장 요청
class AttendanceSessionSave(BaseModel):
    date: date
    period: int = Field(..., ge=0)
    topic: Optional[str] = None                      # 수업 주제
    records: List[AttendanceRecordIn]
    apply_to_all_sessions: bool = False              # 같은 요일의 이 수업 모든 교시에 적용


# ✅ 휴강 / 휴강 취소 요청
class SessionRef(BaseModel):
    date: date
    period: int = Field(..., ge=0)


# ✅ 출석 배점 수정 (음수 불가)
class PoolScoreUpdate(BaseModel):
    score: float = Field(..., ge=0)
