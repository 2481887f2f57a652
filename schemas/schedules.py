from pydantic import BaseModel, Field
from typing import List, Optional


# ✅ 시간표 슬롯 단건 배정/해제 요청
# course_id 가 None 이면 해당 (요일, 교시) 슬롯 해제
class SlotUpdate(BaseModel):
    teacher_id: int                                          # 교사 ID
    day: int = Field(..., ge=0, le=6)                        # 요일 (0=일요일 ~ 6=토요일)
    period: int = Field(..., ge=0)                           # 교시 (0=아침, 7=야간)
    course_id: Optional[int] = None                          # 배정할 수업 ID


# ✅ 교사 시간표 전체 저장 요청의 슬롯 1건
class TeacherSlot(BaseModel):
    day: int = Field(..., ge=0, le=6)
    period: int = Field(..., ge=0)
    course_id: int


class TeacherScheduleSave(BaseModel):
    slots: List[TeacherSlot] = []                            # 빈 목록이면 교사 시간표 전체 해제
