from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role, TEACHER_ROLES
from models.users import User
from schemas.common import COMMON_ERRORS
from schemas.grades import ScoreUpdate
from services import grade_service
from services.errors import ValidationFailedError

router = APIRouter(prefix="/grades", tags=["grades"])

staff_only = require_roles(Role.ADMIN, *TEACHER_ROLES)


def _parse_term(term_id: Optional[str]):
    """None → 현재 학기 / "all" → 전체 / 숫자 → 해당 학기"""
    if term_id is None or term_id == "all":
        return term_id
    if not term_id.isdigit():
        raise ValidationFailedError("term_id must be a number or 'all'")
    return int(term_id)


# ==========================================================
# [1단계] 학생 성적
# ==========================================================

# ✅ [READ] 본인 성적 (현재 학기)
@router.get("/me", responses=COMMON_ERRORS)
def read_my_grades(db: Session = Depends(get_db), user: User = Depends(require_roles(Role.STUDENT))):
    return {"success": True, "data": grade_service.get_student_grades(db, user.id)}


# ✅ [READ] 교직원용 학생 성적 (학기 선택, "all" 가능)
@router.get("/students/{student_id}", responses=COMMON_ERRORS)
def read_student_grades(
    student_id: int,
    term_id: Optional[str] = Query(None, description='학기 ID 또는 "all" (생략 시 현재 학기)'),
    db: Session = Depends(get_db),
    _: User = Depends(staff_only),
):
    data = grade_service.get_student_grades(db, student_id, _parse_term(term_id))
    return {"success": True, "data": data}


# ✅ [READ] 학기별 평균 성적 추이
@router.get("/students/{student_id}/history", responses=COMMON_ERRORS)
def read_grade_history(student_id: int, db: Session = Depends(get_db), _: User = Depends(staff_only)):
    return {"success": True, "data": grade_service.get_grade_history(db, student_id)}


# ✅ [READ] 학생이 수강한 학기 목록
@router.get("/students/{student_id}/terms", responses=COMMON_ERRORS)
def read_student_terms(student_id: int, db: Session = Depends(get_db), _: User = Depends(staff_only)):
    terms = grade_service.get_student_semesters(db, student_id)
    return {
        "success": True,
        "data": [{"id": t.id, "name": t.display_name, "is_active": t.is_active} for t in terms],
    }


# ==========================================================
# [2단계] 교사 성적부 / 채점
# ==========================================================

# ✅ [READ] 수업 성적부 (담당 교사만)
@router.get("/courses/{course_id}/gradebook", responses=COMMON_ERRORS)
def read_gradebook(course_id: int, db: Session = Depends(get_db), user: User = Depends(staff_only)):
    return {"success": True, "data": grade_service.get_course_gradebook(db, course_id, user)}


# ✅ [UPDATE] 제출물 채점 / 채점 취소
@router.put("/assignments/{assignment_id}/students/{student_id}", responses=COMMON_ERRORS)
def update_submission_score(
    assignment_id: int,
    student_id: int,
    body: ScoreUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(staff_only),
):
    result = grade_service.score_submission(db, assignment_id, student_id, body.score, user)
    return {"success": True, "data": result, "message": "Score updated successfully"}


# ==========================================================
# [3단계] 담임
# ==========================================================

# ✅ [READ] 담임 학급 학생별 출석률/평균 성적
@router.get("/classes/{class_id}", responses=COMMON_ERRORS)
def read_homeroom_class(class_id: int, db: Session = Depends(get_db), user: User = Depends(staff_only)):
    return {"success": True, "data": grade_service.get_homeroom_class_details(db, class_id, user)}


# ✅ [READ] 학생 성적표
@router.get("/classes/{class_id}/students/{student_id}/report", responses=COMMON_ERRORS)
def read_report_card(class_id: int, student_id: int, db: Session = Depends(get_db), user: User = Depends(staff_only)):
    return {"success": True, "data": grade_service.get_report_card(db, class_id, student_id, user)}
