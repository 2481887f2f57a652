from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role, TEACHER_ROLES
from models.users import User
from schemas.attendance import AttendanceSessionSave, SessionRef, PoolScoreUpdate
from schemas.common import COMMON_ERRORS
from services import attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"])

teacher_only = require_roles(Role.ADMIN, *TEACHER_ROLES)


# ==========================================================
# [1단계] 세션 출결
# ==========================================================

# ✅ [READ] 세션 명단 + 기존 출결
@router.get("/courses/{course_id}/sessions", responses=COMMON_ERRORS)
def read_session(
    course_id: int,
    day: date = Query(..., alias="date", description="수업 날짜 (예: 2025-09-17)"),
    period: int = Query(..., ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(teacher_only),
):
    return {"success": True, "data": attendance_service.get_session(db, course_id, day, period, user)}


# ✅ [UPDATE] 세션 출결 저장 (upsert)
@router.put("/courses/{course_id}/sessions", responses=COMMON_ERRORS)
def save_session(course_id: int, body: AttendanceSessionSave, db: Session = Depends(get_db), user: User = Depends(teacher_only)):
    result = attendance_service.save_session(
        db,
        course_id,
        body.date,
        body.period,
        body.topic,
        [r.model_dump() for r in body.records],
        user,
        apply_to_all_sessions=body.apply_to_all_sessions,
    )
    return {"success": True, "data": result, "message": "Attendance saved successfully"}


# ✅ [CREATE] 휴강 처리
@router.post("/courses/{course_id}/sessions/skip", responses=COMMON_ERRORS)
def skip_session(course_id: int, body: SessionRef, db: Session = Depends(get_db), user: User = Depends(teacher_only)):
    result = attendance_service.skip_session(db, course_id, body.date, body.period, user)
    return {"success": True, "data": result, "message": "Session skipped"}


# ✅ [DELETE] 휴강 취소 (세션 기록 소프트 삭제)
@router.delete("/courses/{course_id}/sessions/skip", responses=COMMON_ERRORS)
def unskip_session(
    course_id: int,
    day: date = Query(..., alias="date"),
    period: int = Query(..., ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(teacher_only),
):
    result = attendance_service.unskip_session(db, course_id, day, period, user)
    return {"success": True, "data": result, "message": "Session restored"}


# ==========================================================
# [2단계] 통계 / 출석 배점
# ==========================================================

# ✅ [READ] 학생별 출결 통계
@router.get("/courses/{course_id}/stats", responses=COMMON_ERRORS)
def read_stats(course_id: int, db: Session = Depends(get_db), user: User = Depends(teacher_only)):
    return {"success": True, "data": attendance_service.get_course_stats(db, course_id, user)}


# ✅ [UPDATE] 출석 배점 수정
@router.put("/courses/{course_id}/pool-score", responses=COMMON_ERRORS)
def update_pool_score(course_id: int, body: PoolScoreUpdate, db: Session = Depends(get_db), user: User = Depends(teacher_only)):
    result = attendance_service.update_pool_score(db, course_id, body.score, user)
    return {"success": True, "data": result, "message": "Attendance pool score updated"}


# ==========================================================
# [3단계] 교사 일별 수업
# ==========================================================

# ✅ [READ] 오늘(또는 지정 날짜) 수업 목록
@router.get("/teachers/me/daily", responses=COMMON_ERRORS)
def read_daily_schedule(
    day: Optional[date] = Query(None, alias="date", description="조회할 날짜 (생략 시 오늘)"),
    db: Session = Depends(get_db),
    user: User = Depends(teacher_only),
):
    target = day or date.today()
    return {"success": True, "data": attendance_service.get_daily_schedule(db, user.id, target)}


# ✅ [CREATE] 해당 날짜 수업 전체 휴강
@router.post("/teachers/me/daily/skip", responses=COMMON_ERRORS)
def skip_all_sessions(
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    user: User = Depends(teacher_only),
):
    result = attendance_service.skip_all_sessions(db, user, day)
    return {"success": True, "data": {"skipped_sessions": result["skipped_sessions"]}, "message": result["message"]}
