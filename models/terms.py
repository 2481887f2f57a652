from sqlalchemy import Column, Integer, String, Boolean, Date, ForeignKey
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin


class Term(SoftDeleteMixin, Base):
    __tablename__ = "terms"  # 학기 (학년도 내 ODD/EVEN)

    id = Column(Integer, primary_key=True, index=True)                              # 학기 고유 ID (PK)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id"), nullable=False)
    type = Column(String(10), nullable=False)                                       # TermType (ODD/EVEN)
    start_date = Column(Date)                                                       # 학기 시작일
    end_date = Column(Date)                                                         # 학기 종료일
    is_active = Column(Boolean, default=False, nullable=False)                      # 현재 학기 여부 (전체에서 하나)

    academic_year = relationship("AcademicYear", back_populates="terms")

    @property
    def display_name(self) -> str:
        year = self.academic_year.name if self.academic_year else ""
        return f"{year} {self.type}".strip()
