from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings

# ✅ 로깅 설정 (루트 레벨은 LOG_LEVEL 환경변수)
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# HTTP/DB 라이브러리 디버그 로그 비활성화
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ 라우터 임포트
from routers import (
    attendance, chat, courses, dashboards, grades,
    learning_profile, meta, schedules, terms,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS 설정 (프론트엔드 연동)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
app.add_middleware(TimingMiddleware)

# ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
add_error_handlers(app)

# ✅ /v1 프리픽스 라우터 등록
app.include_router(attendance.router,       prefix="/v1")
app.include_router(chat.router,             prefix="/v1")
app.include_router(courses.router,          prefix="/v1")
app.include_router(dashboards.router,       prefix="/v1")
app.include_router(grades.router,           prefix="/v1")
app.include_router(learning_profile.router, prefix="/v1")
app.include_router(meta.router,             prefix="/v1")
app.include_router(schedules.router,        prefix="/v1")
app.include_router(terms.router,            prefix="/v1")


# ✅ 헬스체크 엔드포인트
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


# ✅ 루트 엔드포인트
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - 학급/수업/성적 관리"}
