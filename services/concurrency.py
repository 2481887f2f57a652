"""
services/concurrency.py

- 낙관적 잠금 헬퍼
- 검사(읽기) 시점의 version 과 같을 때만 version + 1 (UPDATE ... WHERE id = ? AND version = ?)
"""

import logging

from sqlalchemy.orm import Session

from services.errors import StaleWriteError

logger = logging.getLogger(__name__)


def bump_version(db: Session, model, row_id: int, expected_version: int) -> None:
    """다른 요청이 먼저 version 을 올렸으면 롤백 후 StaleWriteError"""
    updated = (
        db.query(model)
        .filter(model.id == row_id, model.version == expected_version)
        .update({model.version: model.version + 1}, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        logger.warning(f"낙관적 잠금 실패: {model.__tablename__}.id={row_id}, expected_version={expected_version}")
        raise StaleWriteError("The record changed while you were editing. Please retry.")
