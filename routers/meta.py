from fastapi import APIRouter

from config.settings import settings

router = APIRouter(prefix="/meta", tags=["Meta"])


@router.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV, "version": settings.APP_VERSION}


# ✅ 클라이언트가 참고하는 정책 값
@router.get("/policy")
def policy():
    return {
        "passing_grade": settings.PASSING_GRADE,
        "default_attendance_pool_score": settings.DEFAULT_ATTENDANCE_POOL_SCORE,
        "chat_poll_interval_sec": settings.CHAT_POLL_INTERVAL_SEC,
    }
