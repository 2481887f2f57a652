from sqlalchemy import Column, Integer, String, Boolean, Date
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin


class AcademicYear(SoftDeleteMixin, Base):
    __tablename__ = "academic_years"  # 학년도

    id = Column(Integer, primary_key=True, index=True)      # 학년도 고유 ID (PK)
    name = Column(String(50), nullable=False)               # 예: "2025/2026"
    start_date = Column(Date)                               # 시작일
    end_date = Column(Date)                                 # 종료일
    is_active = Column(Boolean, default=False, nullable=False)

    # ✅ 학년도에 속한 학기 목록 (1:N)
    terms = relationship("Term", back_populates="academic_year")
