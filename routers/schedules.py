from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role
from models.users import User
from schemas.common import COMMON_ERRORS, CONFLICT_ERRORS
from schemas.schedules import SlotUpdate, TeacherScheduleSave
from services import schedule_service

router = APIRouter(prefix="/schedules", tags=["schedules"])

admin_only = require_roles(Role.ADMIN)


# ==========================================================
# [1단계] 조회
# ==========================================================

# ✅ [READ] 교사별 현재 학기 시간표
@router.get("/teachers/{teacher_id}", responses=COMMON_ERRORS)
def read_teacher_schedule(teacher_id: int, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return {"success": True, "data": schedule_service.get_teacher_schedule(db, teacher_id)}


# ✅ [READ] 해당 슬롯에 배치하면 수강생 충돌이 나는 수업 목록
@router.get("/teachers/{teacher_id}/conflicts", responses=COMMON_ERRORS)
def read_conflicting_courses(
    teacher_id: int,
    day: int = Query(..., ge=0, le=6, description="요일 (0=일요일)"),
    period: int = Query(..., ge=0, description="교시"),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    ids = schedule_service.get_conflicting_courses(db, teacher_id, day, period)
    return {"success": True, "data": {"conflicting_course_ids": ids}}


# ✅ [READ] 전체 시간표 (현재 학기)
@router.get("/master", responses=COMMON_ERRORS)
def read_master_schedule(db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return {"success": True, "data": schedule_service.get_master_schedule(db)}


# ==========================================================
# [2단계] 수정
# ==========================================================

# ✅ [UPDATE] 슬롯 단건 배정/해제
@router.put("/slot", responses=CONFLICT_ERRORS)
def update_schedule_slot(body: SlotUpdate, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    result = schedule_service.update_slot(db, body.teacher_id, body.day, body.period, body.course_id)
    return {"success": True, "data": result, "message": "Schedule updated successfully"}


# ✅ [UPDATE] 교사 시간표 전체 저장 (충돌이 있으면 전체 거부)
@router.put("/teachers/{teacher_id}", responses=CONFLICT_ERRORS)
def save_teacher_schedule(
    teacher_id: int,
    body: TeacherScheduleSave,
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    slots = [(s.day, s.period, s.course_id) for s in body.slots]
    result = schedule_service.save_teacher_schedule(db, teacher_id, slots)
    return {"success": True, "data": result, "message": "Schedule saved successfully"}
