from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base
from models.base import SoftDeleteMixin


class Class(SoftDeleteMixin, Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)      # 학급 고유 ID (PK)
    name = Column(String(50), nullable=False)               # 학급명 (예: 10-A)

    # ==========================================================
    # [관계 설정]
    # ==========================================================

    # ✅ 학기 ID (FK)
    term_id = Column(Integer, ForeignKey("terms.id"), nullable=False)

    # ✅ 담임 교사 ID (FK)
    #    - users.id를 참조
    homeroom_teacher_id = Column(Integer, ForeignKey("users.id"))

    term = relationship("Term")
    homeroom_teacher = relationship("User", foreign_keys=[homeroom_teacher_id])

    # ✅ 학급 소속 학생 (1:N, ClassEnrollment 경유)
    enrollments = relationship("ClassEnrollment", back_populates="class_", cascade="all, delete-orphan")

    # ✅ 학급에 연결된 수업 목록
    courses = relationship("Course", back_populates="class_")


class ClassEnrollment(Base):
    __tablename__ = "class_enrollments"
    __table_args__ = (UniqueConstraint("class_id", "student_id", name="uq_class_student"),)

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    class_ = relationship("Class", back_populates="enrollments")
    student = relationship("User")
