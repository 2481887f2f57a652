from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin


class Schedule(SoftDeleteMixin, Base):
    __tablename__ = "schedules"  # 수업 시간표 슬롯

    id = Column(Integer, primary_key=True, index=True)                            # 슬롯 고유 ID (PK)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)                                 # 요일 (0=일요일 ~ 6=토요일)
    period = Column(Integer, nullable=False)                                      # 교시 (0=아침, 7=야간)

    course = relationship("Course", back_populates="schedules")
