"""
services/learning_profile_service.py

- 학생의 채점된 제출물(과제/수업까지 모두 살아있는 것)을 모아 학습 영역 프로필 계산
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from models.assignments import Assignment
from models.courses import Course
from models.submissions import Submission
from models.users import User
from services.errors import NotFoundError
from services.intelligence_profile import DomainScore, compute_intelligence_profile, from_submission


def graded_submissions(db: Session, student_id: int, term_id: Optional[int] = None) -> List[Submission]:
    query = (
        db.query(Submission)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .join(Course, Course.id == Assignment.course_id)
        .filter(
            Submission.student_id == student_id,
            Submission.grade.isnot(None),
            Submission.live(),
            Assignment.live(),
            Course.live(),
        )
    )
    if term_id is not None:
        query = query.filter(Course.term_id == term_id)
    return query.order_by(Submission.id).all()


def get_learning_profile(db: Session, student_id: int, term_id: Optional[int] = None) -> List[DomainScore]:
    student = db.query(User).filter(User.id == student_id, User.live()).first()
    if student is None:
        raise NotFoundError("Student not found")

    works = [from_submission(s) for s in graded_submissions(db, student_id, term_id)]
    return compute_intelligence_profile(works)


def top_domain(profile: List[DomainScore]) -> Optional[DomainScore]:
    """활동이 있는 영역 중 최고 점수 (없으면 None)"""
    return next((d for d in profile if d.count > 0), None)
