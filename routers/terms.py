from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user, require_roles
from models.enums import Role
from models.users import User
from schemas.common import COMMON_ERRORS
from services import term_service

router = APIRouter(prefix="/terms", tags=["terms"])


# ✅ [READ] 학기 목록 (최신순)
@router.get("/", responses=COMMON_ERRORS)
def read_terms(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return {"success": True, "data": [term_service.term_to_dict(t) for t in term_service.list_terms(db)]}


# ✅ [READ] 현재 활성 학기
@router.get("/active", responses=COMMON_ERRORS)
def read_active_term(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    term = term_service.get_active_term(db)
    return {"success": True, "data": term_service.term_to_dict(term) if term else None}


# ✅ [UPDATE] 학기 활성화 (나머지 학기/학년도는 모두 비활성화)
@router.post("/{term_id}/activate", responses=COMMON_ERRORS)
def activate_term(term_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles(Role.ADMIN))):
    term = term_service.activate_term(db, term_id)
    return {"success": True, "data": term_service.term_to_dict(term), "message": "Active term updated"}
