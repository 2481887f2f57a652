from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base
from models.base import SoftDeleteMixin


class Attendance(SoftDeleteMixin, Base):
    __tablename__ = "attendance"  # 출결 기록 테이블 (수업+학생+날짜+교시 단위)

    id = Column(Integer, primary_key=True, index=True)                               # 출결 고유 ID (Primary Key)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)                                              # 날짜
    period = Column(Integer, nullable=False, default=1)                              # 교시
    status = Column(String(20), nullable=False)                                      # 출결 상태 (AttendanceStatus)
    topic = Column(String(200))                                                      # 수업 주제
    excuse_reason = Column(String(200))                                              # 사유 (EXCUSED 등)

    course = relationship("Course")
    student = relationship("User")
