from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    """DB에 저장하는 시각은 모두 tz 정보 없는 UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SoftDeleteMixin:
    """
    소프트 삭제 공통 믹스인
    - deleted_at 이 NULL 이면 살아있는 레코드
    - 조회 시 반드시 Model.live() 조건을 붙여서 사용
    """

    deleted_at = Column(DateTime, nullable=True, index=True)   # 삭제 시각 (NULL = 활성)

    @classmethod
    def live(cls):
        return cls.deleted_at.is_(None)

    def is_live(self) -> bool:
        return self.deleted_at is None

    def soft_delete(self, when: datetime = None):
        self.deleted_at = when or utcnow()
