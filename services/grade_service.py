"""
services/grade_service.py

- DB에서 과제/제출/출결을 읽어 grade_calculator 엔진에 넘기고 결과를 조립
- 학생 본인 성적, 교사 성적부, 학기별 성적 추이, 담임 성적표/학급 요약, 제출 채점
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from config.settings import settings

from models.attendance import Attendance
from models.assignments import Assignment
from models.classes import Class, ClassEnrollment
from models.courses import Course
from models.enums import Role
from models.submissions import Submission
from models.terms import Term
from models.users import User
from models.base import utcnow
from services.course_queries import student_courses, get_live_course
from services.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from services.grade_calculator import (
    CourseGrade, build_breakdown, summarize_course_grade, average, attendance_ratio,
)
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)


# =========================================================
# 1) 공통 조립 함수
# =========================================================

def _submission_map(assignments: List[Assignment], student_id: int) -> Dict[int, Optional[Submission]]:
    """과제별 해당 학생의 첫 번째 살아있는 제출"""
    result = {}
    for assignment in assignments:
        mine = [s for s in assignment.live_submissions if s.student_id == student_id]
        mine.sort(key=lambda s: s.id)
        result[assignment.id] = mine[0] if mine else None
    return result


def _attendance_by_student(db: Session, course_id: int, student_id: Optional[int] = None) -> Dict[int, List[str]]:
    query = db.query(Attendance.student_id, Attendance.status).filter(
        Attendance.course_id == course_id, Attendance.live()
    )
    if student_id is not None:
        query = query.filter(Attendance.student_id == student_id)

    grouped: Dict[int, List[str]] = {}
    for sid, status in query.all():
        grouped.setdefault(sid, []).append(status)
    return grouped


def course_grade_for_student(db: Session, course: Course, student_id: int, statuses: Optional[List[str]] = None) -> CourseGrade:
    assignments = course.live_assignments
    breakdown = build_breakdown(assignments, _submission_map(assignments, student_id))
    if statuses is None:
        statuses = _attendance_by_student(db, course.id, student_id).get(student_id, [])
    return summarize_course_grade(breakdown, statuses, course.attendance_pool_score)


def _grade_row(course: Course, result: CourseGrade) -> dict:
    return {
        "course_id": course.id,
        "course_name": course.display_name,
        "teacher_name": course.teacher.name if course.teacher else None,
        "grade": result.grade,
        "grade_without_attendance": result.grade_without_attendance,
        "attendance_percentage": result.attendance_percentage,
        "breakdown": result.to_dict()["breakdown"],
    }


# =========================================================
# 2) 학생 성적 (본인 / 교직원 조회)
# =========================================================

def get_student_grades(db: Session, student_id: int, term_id=None) -> List[dict]:
    courses = student_courses(db, student_id, term_id).all()
    return [_grade_row(c, course_grade_for_student(db, c, student_id)) for c in courses]


def get_grade_history(db: Session, student_id: int) -> List[dict]:
    """학기별 평균 성적 추이 (학기 시작일 오름차순)"""
    courses = (
        student_courses(db, student_id, "all")
        .join(Term, Term.id == Course.term_id)
        .order_by(None)
        .order_by(Term.start_date, Course.id)
        .all()
    )

    groups: "OrderedDict[int, dict]" = OrderedDict()
    for course in courses:
        result = course_grade_for_student(db, course, student_id)
        group = groups.setdefault(course.term_id, {"term": course.term, "grades": []})
        group["grades"].append(result.grade)

    return [
        {
            "term_id": term_id,
            "name": group["term"].display_name,
            "average": average(group["grades"]),
        }
        for term_id, group in groups.items()
    ]


def get_student_semesters(db: Session, student_id: int) -> List[Term]:
    """학생이 수강 기록이 있는 학기 목록 (최신순)"""
    term_ids = {c.term_id for c in student_courses(db, student_id, "all").all()}
    if not term_ids:
        return []
    return (
        db.query(Term)
        .filter(Term.id.in_(term_ids), Term.live())
        .order_by(Term.start_date.desc())
        .all()
    )


# =========================================================
# 3) 교사 성적부
# =========================================================

def get_course_gradebook(db: Session, course_id: int, user: User) -> dict:
    course = get_live_course(db, course_id)
    if course.teacher_id != user.id and not user.has_role(Role.ADMIN):
        logger.warning(f"성적부 접근 거부: user={user.id}, course={course_id}")
        raise PermissionDeniedError("Unauthorized")

    assignments = course.live_assignments
    attendance = _attendance_by_student(db, course.id)

    rows = []
    for student in course.students:
        result = course_grade_for_student(db, course, student.id, attendance.get(student.id, []))
        subs = _submission_map(assignments, student.id)
        rows.append({
            "student_id": student.id,
            "student_name": student.name,
            "attendance_percentage": result.attendance_percentage,
            "total_score": result.grade,
            "scores": {
                a.id: (subs[a.id].grade if subs[a.id] is not None else None)
                for a in assignments
            },
            "breakdown": result.to_dict()["breakdown"],
        })

    return {
        "course_id": course.id,
        "course_name": course.name,
        "max_points": sum(a.max_points for a in assignments if not a.is_extra_credit),
        "assignments": [
            {"id": a.id, "title": a.title, "max_points": a.max_points, "is_extra_credit": a.is_extra_credit}
            for a in assignments
        ],
        "gradebook": rows,
    }


# =========================================================
# 4) 담임: 학급 요약 / 성적표
# =========================================================

def _get_homeroom_class(db: Session, class_id: int, user: User) -> Class:
    cls = db.query(Class).filter(Class.id == class_id, Class.live()).first()
    if cls is None:
        raise NotFoundError("Class not found")
    if cls.homeroom_teacher_id != user.id and not user.has_role(Role.ADMIN):
        logger.warning(f"담임 학급 접근 거부: user={user.id}, class={class_id}")
        raise PermissionDeniedError("Unauthorized")
    return cls


def get_homeroom_class_details(db: Session, class_id: int, user: User) -> dict:
    """
    학급 학생별 전체 출석률 / 평균 수업 성적
    - 배점(만점 또는 출석 배점)이 있는 수업만 평균에 포함
    """
    cls = _get_homeroom_class(db, class_id, user)
    courses = [c for c in cls.courses if c.is_live()]
    attendance = {c.id: _attendance_by_student(db, c.id) for c in courses}

    students = []
    live_students = [e.student for e in cls.enrollments if e.student is not None and e.student.is_live()]
    for student in sorted(live_students, key=lambda s: s.name):
        all_statuses: List[str] = []
        course_grades: List[float] = []

        for course in courses:
            statuses = attendance[course.id].get(student.id, [])
            all_statuses.extend(statuses)
            result = course_grade_for_student(db, course, student.id, statuses)
            if result.breakdown.max_points_possible > 0 or (course.attendance_pool_score or 0) > 0:
                course_grades.append(result.grade)

        students.append({
            "id": student.id,
            "name": student.name,
            "email": student.email,
            "attendance": round_half_up(attendance_ratio(all_statuses) * 100, 1),
            "average_grade": average(course_grades),
        })

    return {
        "class_id": cls.id,
        "class_name": cls.name,
        "term": cls.term.display_name if cls.term else None,
        "students": students,
    }


def get_report_card(db: Session, class_id: int, student_id: int, user: User) -> dict:
    cls = _get_homeroom_class(db, class_id, user)
    student = db.query(User).filter(User.id == student_id, User.live()).first()
    if student is None:
        raise NotFoundError("Student not found")

    # ✅ 해당 학급 소속 학생만 조회 가능
    in_class = (
        db.query(ClassEnrollment)
        .filter(ClassEnrollment.class_id == cls.id, ClassEnrollment.student_id == student.id)
        .first()
    )
    if in_class is None:
        logger.warning(f"성적표 접근 거부 (학급 외 학생): user={user.id}, class={class_id}, student={student_id}")
        raise NotFoundError("Student not found")

    courses = student_courses(db, student_id, cls.term_id).all()
    rows = []
    for course in courses:
        result = course_grade_for_student(db, course, student_id)
        rows.append({
            "id": course.id,
            "name": course.display_name,
            "code": course.subject.code if course.subject and course.subject.code else "",
            "teacher": course.teacher.name if course.teacher else None,
            "grade": int(round_half_up(result.grade)),
            "attendance": result.attendance_percentage,
            "passed": result.grade >= settings.PASSING_GRADE,
        })

    return {
        "student": {"id": student.id, "name": student.name, "official_id": student.official_id},
        "class": {
            "id": cls.id,
            "name": cls.name,
            "term": cls.term.display_name if cls.term else None,
            "homeroom_teacher": cls.homeroom_teacher.name if cls.homeroom_teacher else None,
        },
        "courses": rows,
        "generated_at": utcnow().isoformat(),
    }


# =========================================================
# 5) 제출 채점
# =========================================================

def score_submission(db: Session, assignment_id: int, student_id: int, score: Optional[float], user: User) -> dict:
    """
    - score: 0~100 또는 None(채점 취소)
    - 채점 취소 시 내용 없는 제출은 소프트 삭제, 내용 있는 제출은 점수만 제거
    - 제출이 없는데 점수를 주면 새 제출 생성 (교사 직접 입력)
    """
    if score is not None and not (0 <= score <= 100):
        raise ValidationFailedError("Score must be between 0 and 100")

    assignment = db.query(Assignment).filter(Assignment.id == assignment_id, Assignment.live()).first()
    if assignment is None:
        raise NotFoundError("Assignment not found")
    if assignment.course.teacher_id != user.id and not user.has_role(Role.ADMIN):
        raise PermissionDeniedError("Unauthorized")

    submissions = (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id, Submission.student_id == student_id, Submission.live())
        .all()
    )

    action = "none"
    if submissions:
        for sub in submissions:
            if score is None:
                if sub.has_content:
                    sub.grade = None
                    action = "ungraded"
                else:
                    sub.soft_delete()
                    action = "removed"
            else:
                sub.grade = score
                action = "graded"
    elif score is not None:
        db.add(Submission(assignment_id=assignment_id, student_id=student_id, grade=score, submitted_at=utcnow()))
        action = "created"

    db.commit()
    logger.info(f"채점 반영: assignment={assignment_id}, student={student_id}, score={score}, action={action}")
    return {"assignment_id": assignment_id, "student_id": student_id, "score": score, "action": action}
