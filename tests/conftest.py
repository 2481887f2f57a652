import os

# ✅ 앱 모듈 import 전에 테스트용 환경변수 지정 (settings 는 import 시점에 로드됨)
os.environ.setdefault("DB_URL_OVERRIDE", "sqlite://")
os.environ["AUTH_INTERNAL_TOKEN"] = "test-token"

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database.db
from database.init_db import init_db
from database.db import Base
from main import app
from models.academic_years import AcademicYear
from models.assignments import Assignment
from models.attendance import Attendance
from models.classes import Class, ClassEnrollment
from models.courses import Course
from models.enums import Role
from models.schedules import Schedule
from models.subjects import Subject
from models.submissions import Submission
from models.terms import Term
from models.users import User, UserRole

TOKEN = "test-token"


class Factory:
    """테스트 데이터 생성 헬퍼 (모두 commit 까지 수행)"""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, name, *roles, email=None, **kwargs):
        roles = roles or (Role.STUDENT,)
        user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@school.test", **kwargs)
        user.roles = [UserRole(role=getattr(r, "value", r)) for r in roles]
        return self._save(user)

    def term(self, name="2025/2026", type="ODD", active=True, start=date(2025, 8, 1), end=date(2026, 1, 31)):
        year = self.db.query(AcademicYear).filter(AcademicYear.name == name).first()
        if year is None:
            year = self._save(AcademicYear(name=name, is_active=active))
        return self._save(Term(
            academic_year_id=year.id, type=type, is_active=active, start_date=start, end_date=end,
        ))

    def subject(self, name, domains=None, report_name=None, code=None):
        return self._save(Subject(name=name, intelligence_types=domains or [], report_name=report_name, code=code))

    def course(self, name, teacher, term, slots=(), students=(), pool=0.0, subject=None, class_=None):
        course = Course(
            name=name,
            teacher_id=teacher.id,
            term_id=term.id,
            attendance_pool_score=pool,
            subject_id=subject.id if subject else None,
            class_id=class_.id if class_ else None,
        )
        course.students = list(students)
        course = self._save(course)
        for day, period in slots:
            self.db.add(Schedule(course_id=course.id, day_of_week=day, period=period))
        self.db.commit()
        self.db.refresh(course)
        return course

    def assignment(self, course, title="Homework", max_points=100, extra=False, late_penalty=0,
                   due=None, domains=None, type="SUBMISSION"):
        return self._save(Assignment(
            course_id=course.id,
            title=title,
            max_points=max_points,
            is_extra_credit=extra,
            late_penalty=late_penalty,
            due_date=due or datetime(2025, 9, 30, 23, 59),
            intelligence_types=domains or [],
            type=type,
        ))

    def submission(self, assignment, student, grade=None, submitted_at=None, **kwargs):
        return self._save(Submission(
            assignment_id=assignment.id,
            student_id=student.id,
            grade=grade,
            submitted_at=submitted_at or datetime(2025, 9, 20, 10, 0),
            **kwargs,
        ))

    def attendance(self, course, student, status, day=date(2025, 9, 1), period=1, topic=None):
        status = getattr(status, "value", status)
        return self._save(Attendance(
            course_id=course.id, student_id=student.id, date=day, period=period, status=status, topic=topic,
        ))

    def homeroom(self, name, term, teacher, students=()):
        cls = self._save(Class(name=name, term_id=term.id, homeroom_teacher_id=teacher.id))
        for student in students:
            self.db.add(ClassEnrollment(class_id=cls.id, student_id=student.id))
        self.db.commit()
        self.db.refresh(cls)
        return cls


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    # ✅ 요청도 테스트와 같은 세션을 사용 (commit 후 테스트 쪽에서 바로 확인 가능)
    def _override_get_db():
        yield db

    app.dependency_overrides[database.db.get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def factory(db):
    return Factory(db)


@pytest.fixture()
def auth():
    def _headers(user):
        return {"Authorization": f"Bearer {TOKEN}", "X-User-Id": str(user.id)}
    return _headers


@pytest.fixture()
def school(factory):
    """
    기본 학교 데이터
    - 현재 학기 1개, 관리자/교사/학생 2명
    - Math: 월 3교시, Alice 수강
    - Science: 화 2교시, 수강생 없음
    """
    term = factory.term()
    admin = factory.user("Admin", Role.ADMIN)
    teacher = factory.user("Teacher Kim", Role.SUBJECT_TEACHER, Role.HOMEROOM_TEACHER)
    alice = factory.user("Alice", Role.STUDENT)
    bob = factory.user("Bob", Role.STUDENT)
    math = factory.course("Math", teacher, term, slots=[(1, 3)], students=[alice], pool=10)
    science = factory.course("Science", teacher, term, slots=[(2, 2)])
    return {
        "term": term,
        "admin": admin,
        "teacher": teacher,
        "alice": alice,
        "bob": bob,
        "math": math,
        "science": science,
    }

