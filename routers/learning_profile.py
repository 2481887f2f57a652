from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role, TEACHER_ROLES
from models.users import User
from schemas.common import COMMON_ERRORS
from services.learning_profile_service import get_learning_profile

router = APIRouter(prefix="/learning-profile", tags=["learning-profile"])


# ✅ [READ] 본인 학습 프로필 (레이더 차트용 6개 영역)
@router.get("/me", responses=COMMON_ERRORS)
def read_my_profile(
    term_id: Optional[int] = Query(None, description="학기 ID (생략 시 전체 학기)"),
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(Role.STUDENT)),
):
    profile = get_learning_profile(db, user.id, term_id)
    return {"success": True, "data": [d.to_dict() for d in profile]}


# ✅ [READ] 교직원용 학생 학습 프로필
@router.get("/students/{student_id}", responses=COMMON_ERRORS)
def read_student_profile(
    student_id: int,
    term_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN, *TEACHER_ROLES)),
):
    profile = get_learning_profile(db, student_id, term_id)
    return {"success": True, "data": [d.to_dict() for d in profile]}
