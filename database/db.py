from sqlalchemy import create_engine               # SQLAlchemy 엔진 생성 도구
from sqlalchemy.orm import declarative_base        # 모델의 Base 클래스
from sqlalchemy.orm import sessionmaker            # 세션 팩토리 함수

from config.settings import settings               # ✅ 환경변수 설정 파일 불러오기

# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성
#    - SQLite(로컬/테스트)는 스레드 체크 해제 필요
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


# ==========================================================
# [공통] DB 세션 관리
# - 요청마다 세션을 열고 응답 후 닫음 (라우터에서 Depends(get_db))
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
