import logging
from sqlalchemy.orm import Session
from database.db import SessionLocal
from database.init_db import init_db
from services.term_service import repair_active_terms

# ✅ 활성 학기가 여러 개로 남아 있는 DB 복구 (시작일이 가장 늦은 학기 하나만 유지)


def run_repair():
    init_db()
    db: Session = SessionLocal()
    try:
        kept = repair_active_terms(db)
    finally:
        db.close()

    if kept is None:
        print("⚠️ 활성 학기가 없습니다")
    else:
        print(f"✅ 활성 학기 복구 완료 (유지: term_id={kept})")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_repair()
