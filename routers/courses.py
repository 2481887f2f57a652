from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role
from models.users import User
from schemas.common import COMMON_ERRORS, CONFLICT_ERRORS
from schemas.courses import EnrollStudent
from services import enrollment_service

router = APIRouter(prefix="/courses", tags=["courses"])

admin_only = require_roles(Role.ADMIN)


# ==========================================================
# [수강 신청 / 취소]
# ==========================================================

# ✅ [CREATE] 학생 1명 수강 신청 (시간표 충돌 검사 + 낙관적 잠금)
@router.post("/{course_id}/students", responses=CONFLICT_ERRORS)
def enroll_student(course_id: int, body: EnrollStudent, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    result = enrollment_service.enroll_student(db, course_id, body.student_id)
    return {"success": True, "data": result, "message": "Student enrolled successfully"}


# ✅ [CREATE] 학급 전체 일괄 수강 신청 (한 명이라도 충돌이 있으면 전체 거부)
@router.post("/{course_id}/classes/{class_id}", responses=CONFLICT_ERRORS)
def enroll_class(course_id: int, class_id: int, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    result = enrollment_service.enroll_class(db, course_id, class_id)
    return {"success": True, "data": {"enrolled": result["enrolled"]}, "message": result["message"]}


# ✅ [DELETE] 수강 취소
@router.delete("/{course_id}/students/{student_id}", responses=CONFLICT_ERRORS)
def remove_student(course_id: int, student_id: int, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    result = enrollment_service.remove_student(db, course_id, student_id)
    return {"success": True, "data": result, "message": "Student removed from course"}
