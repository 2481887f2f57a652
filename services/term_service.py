"""
services/term_service.py

- 학기 목록 / 현재 학기 / 학기 활성화
- "활성 학기는 하나" 규칙은 활성화 시점에 한 트랜잭션으로 보장
- 과거 데이터에서 규칙이 깨진 경우 repair_active_terms() 로 복구 (scripts/repair_active_terms.py)
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.academic_years import AcademicYear
from models.terms import Term
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


def term_to_dict(term: Term) -> dict:
    return {
        "id": term.id,
        "academic_year_id": term.academic_year_id,
        "academic_year": term.academic_year.name if term.academic_year else None,
        "type": term.type,
        "name": term.display_name,
        "start_date": term.start_date.isoformat() if term.start_date else None,
        "end_date": term.end_date.isoformat() if term.end_date else None,
        "is_active": term.is_active,
    }


def list_terms(db: Session) -> List[Term]:
    return db.query(Term).filter(Term.live()).order_by(Term.start_date.desc(), Term.id.desc()).all()


def get_active_term(db: Session) -> Optional[Term]:
    return db.query(Term).filter(Term.live(), Term.is_active.is_(True)).first()


def activate_term(db: Session, term_id: int) -> Term:
    """다른 학기/학년도 전부 비활성화 → 대상 학기와 그 학년도만 활성화 (단일 트랜잭션)"""
    term = db.query(Term).filter(Term.id == term_id, Term.live()).first()
    if term is None:
        raise NotFoundError("Term not found")

    try:
        db.query(Term).filter(Term.is_active.is_(True), Term.id != term.id).update(
            {Term.is_active: False}, synchronize_session=False
        )
        db.query(AcademicYear).filter(
            AcademicYear.is_active.is_(True), AcademicYear.id != term.academic_year_id
        ).update({AcademicYear.is_active: False}, synchronize_session=False)

        term.is_active = True
        if term.academic_year is not None:
            term.academic_year.is_active = True
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(term)
    logger.info(f"학기 활성화: term={term.id} ({term.display_name})")
    return term


def repair_active_terms(db: Session) -> Optional[int]:
    """
    활성 학기가 여러 개인 경우 시작일이 가장 늦은 학기 하나만 남기고 비활성화
    - 반환값: 남긴 학기 id (활성 학기가 없으면 None)
    """
    active = (
        db.query(Term)
        .filter(Term.live(), Term.is_active.is_(True))
        .order_by(Term.start_date.desc(), Term.id.desc())
        .all()
    )
    if not active:
        return None
    if len(active) == 1:
        return active[0].id

    keep, extras = active[0], active[1:]
    for term in extras:
        term.is_active = False
        logger.warning(f"중복 활성 학기 비활성화: term={term.id} ({term.display_name})")
    db.commit()
    logger.info(f"활성 학기 복구 완료: keep={keep.id}, deactivated={len(extras)}")
    return keep.id
