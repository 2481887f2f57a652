from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import SoftDeleteMixin, utcnow


class Submission(SoftDeleteMixin, Base):
    __tablename__ = "submissions"  # 과제 제출/채점 기록 (과제+학생 1건 기대, 강제하지 않음)

    id = Column(Integer, primary_key=True, index=True)                                    # 제출 고유 ID (PK)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    grade = Column(Float, nullable=True)                                                  # 점수 (0~100, 만점 대비 %)
    submitted_at = Column(DateTime, default=utcnow)                                       # 제출 시각
    submission_url = Column(Text)                                                         # 제출 본문/URL
    attachment_url = Column(String(500))                                                  # 첨부 파일
    link = Column(String(500))                                                            # 외부 링크
    feedback = Column(Text)                                                               # 교사 피드백

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User")

    @property
    def has_content(self) -> bool:
        return bool(self.submission_url or self.attachment_url or self.link or self.feedback)
