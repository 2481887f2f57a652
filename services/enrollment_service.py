"""
services/enrollment_service.py

- 수강 신청 (단건 / 학급 일괄) 및 수강 취소
- 충돌 검사 → 쓰기 사이의 경쟁을 막기 위해 수업/학생 version 을 조건부로 올린 뒤에만 기록
  (UPDATE ... SET version = version + 1 WHERE id = ? AND version = ?)
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from models.classes import Class
from models.courses import Course, course_students
from models.enums import Role
from models.users import User
from services.course_queries import get_live_course
from services.concurrency import bump_version
from services.errors import NotFoundError, ValidationFailedError, ScheduleConflictError
from services.schedule_conflict import check_student_schedule_conflict, StudentConflict
from utils.schedule_labels import describe_slot

logger = logging.getLogger(__name__)


def _get_live_student(db: Session, student_id: int) -> User:
    student = db.query(User).filter(User.id == student_id, User.live()).first()
    if student is None or not student.has_role(Role.STUDENT):
        raise NotFoundError("Student not found")
    return student


def _insert_enrollment(db: Session, course_id: int, student_id: int) -> None:
    db.execute(course_students.insert().values(course_id=course_id, student_id=student_id))


# =========================================================
# 1) 단건 수강 신청
# =========================================================

def enroll_student(db: Session, course_id: int, student_id: int) -> dict:
    course = get_live_course(db, course_id)
    course_version = course.version

    student = _get_live_student(db, student_id)
    student_version = student.version

    if student.id in course.student_ids:
        raise ValidationFailedError("Student is already enrolled")

    conflict = check_student_schedule_conflict(db, student.id, course.id)
    if conflict is not None:
        message = f"Schedule conflict with {conflict.course_name} on {describe_slot(conflict.day_of_week, conflict.period)}"
        logger.warning(f"수강 신청 거부 (시간표 충돌): course={course_id}, student={student_id}, {message}")
        raise ScheduleConflictError(message, details=[conflict.to_dict()])

    # ✅ 검사 시점의 버전 그대로일 때만 기록 (수업 + 학생 두 행 모두)
    bump_version(db, Course, course.id, course_version)
    bump_version(db, User, student.id, student_version)
    _insert_enrollment(db, course.id, student.id)
    db.commit()

    logger.info(f"수강 신청 완료: course={course_id}, student={student_id}")
    return {"course_id": course.id, "student_id": student.id}


# =========================================================
# 2) 학급 일괄 수강 신청
# =========================================================

def enroll_class(db: Session, course_id: int, class_id: int) -> dict:
    """
    학급 학생 중 아직 수강하지 않은 학생 전체를 등록
    - 전원을 먼저 검사하고, 한 명이라도 충돌이 있으면 아무도 등록하지 않음
    """
    course = get_live_course(db, course_id)
    course_version = course.version

    cls = db.query(Class).filter(Class.id == class_id, Class.live()).first()
    if cls is None:
        raise NotFoundError("Class not found")

    enrolled_ids = course.student_ids
    candidates = [
        e.student for e in cls.enrollments
        if e.student is not None and e.student.is_live() and e.student.id not in enrolled_ids
    ]
    if not candidates:
        return {"enrolled": 0, "message": "All students in this class are already enrolled"}

    conflicts: List[StudentConflict] = []
    for student in candidates:
        conflict = check_student_schedule_conflict(db, student.id, course.id)
        if conflict is not None:
            conflicts.append(StudentConflict(student_name=student.name, conflict=conflict))

    if conflicts:
        lines = [
            f"{c.student_name}: {c.conflict.course_name} ({describe_slot(c.conflict.day_of_week, c.conflict.period)})"
            for c in conflicts
        ]
        logger.warning(f"학급 일괄 수강 신청 거부: course={course_id}, class={class_id}, conflicts={len(conflicts)}")
        raise ScheduleConflictError(
            "Schedule conflicts detected:\n" + "\n".join(lines),
            details=[c.to_dict() for c in conflicts],
        )

    versions = {s.id: s.version for s in candidates}
    bump_version(db, Course, course.id, course_version)
    for student in candidates:
        bump_version(db, User, student.id, versions[student.id])
        _insert_enrollment(db, course.id, student.id)
    db.commit()

    logger.info(f"학급 일괄 수강 신청 완료: course={course_id}, class={class_id}, count={len(candidates)}")
    return {"enrolled": len(candidates), "message": f"Enrolled {len(candidates)} students"}


# =========================================================
# 3) 수강 취소
# =========================================================

def remove_student(db: Session, course_id: int, student_id: int) -> dict:
    course = get_live_course(db, course_id)
    if student_id not in course.student_ids:
        raise NotFoundError("Student is not enrolled in this course")

    bump_version(db, Course, course.id, course.version)
    db.execute(
        course_students.delete().where(
            course_students.c.course_id == course.id,
            course_students.c.student_id == student_id,
        )
    )
    db.commit()

    logger.info(f"수강 취소: course={course_id}, student={student_id}")
    return {"course_id": course_id, "student_id": student_id}
