from sqlalchemy import Column, Integer, String, Float, ForeignKey, Table
from sqlalchemy.orm import relationship

from config.settings import settings
from database.db import Base
from models.base import SoftDeleteMixin


# ✅ 수업-학생 수강 관계 (N:M)
course_students = Table(
    "course_students",
    Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id"), primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Course(SoftDeleteMixin, Base):
    __tablename__ = "courses"  # 수업(학기별 과목 개설) 테이블

    id = Column(Integer, primary_key=True, index=True)                     # 수업 고유 ID (PK)
    name = Column(String(100), nullable=False)                             # 수업명
    report_name = Column(String(100))                                      # 성적표 표기명
    term_id = Column(Integer, ForeignKey("terms.id"), nullable=False)      # 소속 학기 (정확히 하나)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False)   # 담당 교사
    class_id = Column(Integer, ForeignKey("classes.id"))                   # 연결 학급 (선택)
    subject_id = Column(Integer, ForeignKey("subjects.id"))                # 과목 (선택)
    attendance_pool_score = Column(Float, default=lambda: settings.DEFAULT_ATTENDANCE_POOL_SCORE, nullable=False)  # 출석 배점 (출석률 비례 가산)
    version = Column(Integer, default=0, nullable=False)                   # 낙관적 잠금용 버전

    # ==========================================================
    # [관계 설정]
    # ==========================================================
    term = relationship("Term")
    teacher = relationship("User", foreign_keys=[teacher_id])
    subject = relationship("Subject")
    class_ = relationship("Class", back_populates="courses")

    # ✅ 수강 학생 (N:M)
    students = relationship("User", secondary=course_students, order_by="User.name")

    # ✅ 시간표 슬롯 (1:N, 소프트 삭제 포함 전체 → live_schedules로 필터)
    schedules = relationship("Schedule", back_populates="course", order_by="Schedule.id")

    # ✅ 과제 (1:N)
    assignments = relationship("Assignment", back_populates="course", order_by="Assignment.id")

    @property
    def live_schedules(self) -> list:
        return [s for s in self.schedules if s.is_live()]

    @property
    def live_assignments(self) -> list:
        return [a for a in self.assignments if a.is_live()]

    @property
    def student_ids(self) -> set:
        return {s.id for s in self.students}

    @property
    def display_name(self) -> str:
        if self.subject and self.subject.report_name:
            return self.subject.report_name
        return self.report_name or self.name
