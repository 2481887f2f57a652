"""
services/course_queries.py

- 여러 서비스에서 반복되는 수업 조회 조건 모음
- 모든 조회는 소프트 삭제 조건(Model.live())을 포함
"""

from sqlalchemy import and_
from sqlalchemy.orm import Session

from models.courses import Course
from models.terms import Term
from models.users import User
from services.errors import NotFoundError


def in_active_term():
    return Course.term.has(and_(Term.is_active.is_(True), Term.live()))


def enrolled(student_id: int):
    return Course.students.any(User.id == student_id)


def live_courses(db: Session):
    return db.query(Course).filter(Course.live())


def student_courses(db: Session, student_id: int, term_id=None):
    """
    학생 수강 수업 조회
    - term_id None  → 현재 활성 학기
    - term_id "all" → 전체 학기
    - 그 외          → 해당 학기
    """
    query = live_courses(db).filter(enrolled(student_id))
    if term_id is None:
        query = query.filter(in_active_term())
    elif term_id != "all":
        query = query.filter(Course.term_id == int(term_id))
    return query.order_by(Course.name)


def teacher_active_courses(db: Session, teacher_id: int):
    return (
        live_courses(db)
        .filter(Course.teacher_id == teacher_id)
        .filter(in_active_term())
        .order_by(Course.name)
    )


def get_live_course(db: Session, course_id: int) -> Course:
    course = live_courses(db).filter(Course.id == course_id).first()
    if course is None:
        raise NotFoundError("Course not found")
    return course
