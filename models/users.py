from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin, utcnow


class User(SoftDeleteMixin, Base):
    __tablename__ = "users"  # 사용자(관리자/교사/학생) 공통 테이블

    id = Column(Integer, primary_key=True, index=True)          # 사용자 고유 ID (PK)
    name = Column(String(100), nullable=False)                  # 이름
    email = Column(String(100), unique=True)                    # 이메일
    nickname = Column(String(50))                               # 닉네임
    official_id = Column(String(50))                            # 학번/사번
    is_active = Column(Boolean, default=True, nullable=False)   # 계정 활성 여부
    created_at = Column(DateTime, default=utcnow)               # 생성 시각
    version = Column(Integer, default=0, nullable=False)        # 수강 신청 낙관적 잠금용 버전

    # ✅ 역할 목록 (1:N)
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan", lazy="selectin")

    @property
    def role_names(self) -> set:
        return {r.role for r in self.roles}

    def has_role(self, *roles) -> bool:
        wanted = {getattr(r, "value", r) for r in roles}
        return bool(self.role_names & wanted)


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_role"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(30), nullable=False)                   # Role enum 값 (예: STUDENT)

    user = relationship("User", back_populates="roles")
