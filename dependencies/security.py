from typing import Optional, Annotated
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from config.settings import settings
from database.db import get_db
from models.users import User
import hmac
import logging

logger = logging.getLogger(__name__)

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]
UserIdHeader = Annotated[Optional[str], Header(alias="X-User-Id")]


def require_internal_token(authorization: AuthHeader = None):
    """외부 ID 제공자가 붙여주는 내부 토큰 검증"""
    # 설정 누락 방지: 환경에서 토큰이 비어있으면 개발 중 오류를 명확히 드러냄
    if not settings.AUTH_INTERNAL_TOKEN:
        raise HTTPException(status_code=500, detail="Server token not configured")

    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # "Bearer <token>" 파싱
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise HTTPException(
            status_code=401,
            detail="Invalid Authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if scheme.lower() != "bearer":
        raise HTTPException(
            status_code=401,
            detail="Invalid auth scheme",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 타이밍 안전 비교
    if not hmac.compare_digest(token.strip(), settings.AUTH_INTERNAL_TOKEN):
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"client": "identity-provider"}


def get_current_user(
    x_user_id: UserIdHeader = None,
    _client: dict = Depends(require_internal_token),
    db: Session = Depends(get_db),
) -> User:
    """X-User-Id 헤더의 사용자 (삭제/비활성 계정은 거부)"""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id header")

    user = db.query(User).filter(User.id == int(x_user_id), User.live()).first()
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def require_roles(*roles):
    """지정한 역할 중 하나라도 가진 사용자만 통과시키는 의존성 생성"""
    def _checker(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(*roles):
            logger.warning(f"권한 부족: user={user.id}, required={[getattr(r, 'value', r) for r in roles]}")
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _checker
