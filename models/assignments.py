from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin, utcnow
from models.enums import AssignmentType


class Assignment(SoftDeleteMixin, Base):
    __tablename__ = "assignments"  # 과제/퀴즈

    id = Column(Integer, primary_key=True, index=True)                            # 과제 고유 ID (PK)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)                                   # 과제 제목
    description = Column(Text)                                                    # 설명
    type = Column(String(20), default=AssignmentType.SUBMISSION.value)            # SUBMISSION / QUIZ
    due_date = Column(DateTime, default=utcnow)                                   # 마감 시각
    max_points = Column(Float, nullable=False, default=100)                       # 만점
    is_extra_credit = Column(Boolean, default=False, nullable=False)              # 가산점 과제 여부
    late_penalty = Column(Float, default=0, nullable=False)                       # 지각 제출 감점 (%)
    intelligence_types = Column(JSON, default=list)                               # 학습 프로필 영역 태그

    course = relationship("Course", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment")

    @property
    def live_submissions(self) -> list:
        return [s for s in self.submissions if s.is_live()]
