"""
services/dashboard_service.py

- 역할별 대시보드 요약 (관리자 / 교사 / 학생 / 담임)
- 각 수치는 같은 요청 세션 안에서 순차 조회 (수치 간 일관성은 보장하지 않음)
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func, or_, and_
from sqlalchemy.orm import Session

from models.assignments import Assignment
from models.attendance import Attendance
from models.classes import Class, ClassEnrollment
from models.courses import Course, course_students
from models.enums import Role, AssignmentType
from models.base import utcnow
from models.schedules import Schedule
from models.submissions import Submission
from models.terms import Term
from models.users import User, UserRole
from services.attendance_service import js_weekday
from services.course_queries import in_active_term, enrolled, live_courses, teacher_active_courses
from services.grade_calculator import attendance_percentage
from services.learning_profile_service import get_learning_profile, top_domain
from utils.schedule_labels import get_period_label

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "roles": sorted(user.role_names),
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _count_users_with_roles(db: Session, *roles: Role) -> int:
    return (
        db.query(func.count(func.distinct(User.id)))
        .join(UserRole, UserRole.user_id == User.id)
        .filter(UserRole.role.in_([r.value for r in roles]), User.live(), User.is_active.is_(True))
        .scalar()
    )


def _topic_for(db: Session, course_id: int, day: date, period: int) -> Optional[str]:
    record = (
        db.query(Attendance.topic)
        .filter(
            Attendance.course_id == course_id,
            Attendance.date == day,
            Attendance.period == period,
            Attendance.live(),
        )
        .first()
    )
    return record[0] if record else None


def _slot_row(db: Session, slot: Schedule, day: date) -> dict:
    return {
        "schedule_id": slot.id,
        "course_id": slot.course_id,
        "course_name": slot.course.name,
        "teacher_name": slot.course.teacher.name if slot.course.teacher else None,
        "class_name": slot.course.class_.name if slot.course.class_ else None,
        "period": slot.period,
        "period_label": get_period_label(slot.period),
        "topic": _topic_for(db, slot.course_id, day, slot.period),
    }


# =========================================================
# 1) 관리자
# =========================================================

def get_admin_dashboard(db: Session) -> dict:
    recent_users = (
        db.query(User)
        .filter(User.live())
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return {
        "stats": {
            "students": _count_users_with_roles(db, Role.STUDENT),
            "teachers": _count_users_with_roles(db, Role.SUBJECT_TEACHER, Role.HOMEROOM_TEACHER),
            "classes": db.query(func.count(Class.id)).filter(Class.live()).scalar(),
            "courses": live_courses(db).filter(in_active_term()).count(),
        },
        "recent_users": [_user_summary(u) for u in recent_users],
    }


# =========================================================
# 2) 교사
# =========================================================

def get_teacher_dashboard(db: Session, teacher: User, today: Optional[date] = None, now: Optional[datetime] = None) -> dict:
    today = today or date.today()
    now = now or utcnow()

    courses = teacher_active_courses(db, teacher.id).all()
    course_ids = [c.id for c in courses]

    students_count = 0
    assignments_count = 0
    recent_submissions: List[Submission] = []
    upcoming: List[Assignment] = []
    if course_ids:
        students_count = (
            db.query(func.count(func.distinct(course_students.c.student_id)))
            .join(User, User.id == course_students.c.student_id)
            .filter(course_students.c.course_id.in_(course_ids), User.live())
            .scalar()
        )
        assignments_count = (
            db.query(func.count(Assignment.id))
            .filter(Assignment.course_id.in_(course_ids), Assignment.live())
            .scalar()
        )
        recent_submissions = (
            db.query(Submission)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .filter(Assignment.course_id.in_(course_ids), Assignment.live(), Submission.live())
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
            .limit(RECENT_LIMIT)
            .all()
        )
        upcoming = (
            db.query(Assignment)
            .filter(Assignment.course_id.in_(course_ids), Assignment.live(), Assignment.due_date >= now)
            .order_by(Assignment.due_date.asc())
            .limit(RECENT_LIMIT)
            .all()
        )

    today_slots = (
        db.query(Schedule)
        .join(Course, Course.id == Schedule.course_id)
        .filter(
            Schedule.day_of_week == js_weekday(today),
            Schedule.live(),
            Course.teacher_id == teacher.id,
            Course.live(),
            in_active_term(),
        )
        .order_by(Schedule.period)
        .all()
    )

    return {
        "stats": {"courses": len(courses), "students": students_count, "assignments": assignments_count},
        "recent_submissions": [
            {
                "id": s.id,
                "student_name": s.student.name if s.student else None,
                "assignment_title": s.assignment.title,
                "course_name": s.assignment.course.name,
                "submitted_at": s.submitted_at.isoformat() if s.submitted_at else None,
                "grade": s.grade,
            }
            for s in recent_submissions
        ],
        "upcoming_assignments": [
            {
                "id": a.id,
                "title": a.title,
                "course_name": a.course.name,
                "due_date": a.due_date.isoformat() if a.due_date else None,
                "submission_count": len(a.live_submissions),
            }
            for a in upcoming
        ],
        "today_classes": [_slot_row(db, s, today) for s in today_slots],
    }


# =========================================================
# 3) 학생
# =========================================================

def get_student_dashboard(db: Session, student: User, today: Optional[date] = None, now: Optional[datetime] = None) -> dict:
    today = today or date.today()
    now = now or utcnow()

    schedule = (
        db.query(Schedule)
        .join(Course, Course.id == Schedule.course_id)
        .filter(
            Schedule.day_of_week == js_weekday(today),
            Schedule.live(),
            Course.live(),
            enrolled(student.id),
            in_active_term(),
        )
        .order_by(Schedule.period)
        .all()
    )

    # 마감 전이거나, 마감이 지났는데 아직 제출하지 않은 제출형 과제
    not_submitted = ~Assignment.submissions.any(and_(Submission.student_id == student.id, Submission.live()))
    deadlines = (
        db.query(Assignment)
        .join(Course, Course.id == Assignment.course_id)
        .filter(
            Assignment.live(),
            Assignment.type == AssignmentType.SUBMISSION.value,
            Course.live(),
            enrolled(student.id),
            in_active_term(),
            or_(Assignment.due_date >= now, and_(Assignment.due_date < now, not_submitted)),
        )
        .order_by(Assignment.due_date.asc())
        .limit(RECENT_LIMIT)
        .all()
    )

    recent_grades = (
        db.query(Submission)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .filter(
            Submission.student_id == student.id,
            Submission.grade.isnot(None),
            Submission.live(),
            Assignment.live(),
        )
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )

    statuses = [
        status for (status,) in (
            db.query(Attendance.status)
            .join(Course, Course.id == Attendance.course_id)
            .filter(Attendance.student_id == student.id, Attendance.live(), Course.live(), in_active_term())
            .all()
        )
    ]

    top = top_domain(get_learning_profile(db, student.id))

    return {
        "today_schedule": [_slot_row(db, s, today) for s in schedule],
        "upcoming_deadlines": [
            {
                "id": a.id,
                "title": a.title,
                "course_name": a.course.name,
                "due_date": a.due_date.isoformat() if a.due_date else None,
                "is_overdue": a.due_date is not None and a.due_date < now,
            }
            for a in deadlines
        ],
        "recent_grades": [
            {
                "id": s.id,
                "assignment_title": s.assignment.title,
                "course_name": s.assignment.course.name,
                "grade": s.grade,
                "submitted_at": s.submitted_at.isoformat() if s.submitted_at else None,
            }
            for s in recent_grades
        ],
        "attendance_pulse": attendance_percentage(statuses),
        "top_domain": top.to_dict() if top else None,
    }


# =========================================================
# 4) 담임
# =========================================================

def get_homeroom_classes(db: Session, teacher: User) -> List[dict]:
    classes = (
        db.query(Class)
        .join(Term, Term.id == Class.term_id)
        .filter(
            Class.homeroom_teacher_id == teacher.id,
            Class.live(),
            Term.is_active.is_(True),
            Term.live(),
        )
        .order_by(Class.name)
        .all()
    )
    counts = dict(
        db.query(ClassEnrollment.class_id, func.count(ClassEnrollment.id))
        .join(User, User.id == ClassEnrollment.student_id)
        .filter(ClassEnrollment.class_id.in_([c.id for c in classes] or [-1]), User.live())
        .group_by(ClassEnrollment.class_id)
        .all()
    )
    return [
        {
            "id": c.id,
            "name": c.name,
            "term": c.term.display_name if c.term else None,
            "student_count": counts.get(c.id, 0),
        }
        for c in classes
    ]
