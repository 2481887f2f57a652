from database.db import Base, engine

# ✅ 매퍼 설정 전에 모든 모델이 등록되도록 import (relationship 문자열 참조 해석용)
from models import users, academic_years, terms, subjects, classes, courses  # noqa: F401
from models import schedules, assignments, submissions, attendance, conversations  # noqa: F401


def init_db(bind=None):
    """테이블이 없으면 생성 (마이그레이션 도구 없이 로컬/테스트 용도)"""
    Base.metadata.create_all(bind=bind or engine)


if __name__ == "__main__":
    init_db()
    print("✅ 테이블 생성 완료")
