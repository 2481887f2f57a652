import csv
import logging
from sqlalchemy.orm import Session
from database.db import SessionLocal
from models.enums import Role
from models.users import User, UserRole  # ✅ 모델 import

logger = logging.getLogger(__name__)

CSV_PATH = "data/users.csv"  # ✅ 파일 경로 (email,name,roles,official_id)

_VALID_ROLES = {r.value for r in Role}


def parse_roles(raw) -> list:
    """ "Subject Teacher, admin" → ["SUBJECT_TEACHER", "ADMIN"] (유효한 값이 없으면 STUDENT) """
    if not raw:
        return [Role.STUDENT.value]
    roles = [r.strip().upper().replace(" ", "_") for r in raw.split(",")]
    valid = [r for r in dict.fromkeys(roles) if r in _VALID_ROLES]
    return valid or [Role.STUDENT.value]


def import_users(db: Session, rows) -> dict:
    """
    이메일 기준 upsert
    - 이름/역할/학번은 CSV 값으로 덮어씀
    - 필수 값(email, name) 누락 행은 실패로 집계하고 계속 진행
    """
    results = {"success": 0, "failed": 0, "errors": []}

    for row in rows:
        email = (row.get("email") or "").strip()
        name = (row.get("name") or "").strip()
        if not email or not name:
            results["failed"] += 1
            results["errors"].append(f"Missing fields for {email or 'unknown user'}")
            continue

        roles = parse_roles(row.get("roles"))
        official_id = (row.get("official_id") or "").strip() or None

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(email=email, name=name, is_active=True)
            db.add(user)
            db.flush()   # 같은 파일 안 중복 이메일 대비
        else:
            user.name = name
            user.roles = [r for r in user.roles if r.role in roles]

        existing = {r.role for r in user.roles}
        for role in roles:
            if role not in existing:
                user.roles.append(UserRole(role=role))
        if official_id:
            user.official_id = official_id

        results["success"] += 1

    db.commit()
    logger.info(f"사용자 가져오기: success={results['success']}, failed={results['failed']}")
    return results


def migrate_users():
    db: Session = SessionLocal()
    try:
        with open(CSV_PATH, newline="", encoding="utf-8-sig") as csvfile:
            results = import_users(db, csv.DictReader(csvfile))
    finally:
        db.close()

    print(f"✅ 사용자 CSV → DB 가져오기 완료 (성공 {results['success']}건, 실패 {results['failed']}건)")
    for error in results["errors"]:
        print(f"  - {error}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    migrate_users()
