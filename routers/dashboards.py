from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_roles
from models.enums import Role, TEACHER_ROLES
from models.users import User
from schemas.common import COMMON_ERRORS
from services import dashboard_service
from services.grade_service import get_homeroom_class_details

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


# ✅ [READ] 관리자 대시보드 (인원/학급/수업 수 + 최근 가입자)
@router.get("/admin", responses=COMMON_ERRORS)
def read_admin_dashboard(db: Session = Depends(get_db), _: User = Depends(require_roles(Role.ADMIN))):
    return {"success": True, "data": dashboard_service.get_admin_dashboard(db)}


# ✅ [READ] 교사 대시보드 (담당 수업 요약 + 최근 제출 + 다가오는 과제 + 오늘 수업)
@router.get("/teacher", responses=COMMON_ERRORS)
def read_teacher_dashboard(db: Session = Depends(get_db), user: User = Depends(require_roles(*TEACHER_ROLES))):
    return {"success": True, "data": dashboard_service.get_teacher_dashboard(db, user)}


# ✅ [READ] 학생 대시보드 (오늘 시간표 + 마감 + 최근 성적 + 출석률 + 강점 영역)
@router.get("/student", responses=COMMON_ERRORS)
def read_student_dashboard(db: Session = Depends(get_db), user: User = Depends(require_roles(Role.STUDENT))):
    return {"success": True, "data": dashboard_service.get_student_dashboard(db, user)}


# ✅ [READ] 담임 대시보드 (현재 학기 담당 학급)
@router.get("/homeroom", responses=COMMON_ERRORS)
def read_homeroom_dashboard(db: Session = Depends(get_db), user: User = Depends(require_roles(Role.HOMEROOM_TEACHER))):
    return {"success": True, "data": dashboard_service.get_homeroom_classes(db, user)}


# ✅ [READ] 담임 학급 상세 (학생별 출석률/평균 성적)
@router.get("/homeroom/classes/{class_id}", responses=COMMON_ERRORS)
def read_homeroom_class(
    class_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(Role.HOMEROOM_TEACHER, Role.ADMIN)),
):
    return {"success": True, "data": get_homeroom_class_details(db, class_id, user)}
