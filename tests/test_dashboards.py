from datetime import date, datetime

from models.enums import AttendanceStatus
from services.dashboard_service import get_student_dashboard, get_teacher_dashboard

MONDAY = date(2025, 9, 1)
NOW = datetime(2025, 9, 15, 12, 0)


def test_admin_dashboard_counts(client, factory, school, auth):
    factory.homeroom("1-A", school["term"], school["teacher"], students=[school["alice"]])

    res = client.get("/v1/dashboards/admin", headers=auth(school["admin"]))
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["stats"] == {"students": 2, "teachers": 1, "classes": 1, "courses": 2}
    assert data["recent_users"][0]["name"] == "Bob"


def test_admin_dashboard_is_admin_only(client, school, auth):
    assert client.get("/v1/dashboards/admin", headers=auth(school["teacher"])).status_code == 403


def test_teacher_dashboard(db, factory, school):
    math, alice = school["math"], school["alice"]
    homework = factory.assignment(math, title="Worksheet", due=datetime(2025, 9, 30, 23, 59))
    factory.assignment(math, title="Old quiz", due=datetime(2025, 9, 5, 23, 59))
    factory.submission(homework, alice, grade=None, submitted_at=datetime(2025, 9, 14, 9, 0))

    data = get_teacher_dashboard(db, school["teacher"], today=MONDAY, now=NOW)
    assert data["stats"] == {"courses": 2, "students": 1, "assignments": 2}
    assert [s["assignment_title"] for s in data["recent_submissions"]] == ["Worksheet"]
    assert [a["title"] for a in data["upcoming_assignments"]] == ["Worksheet"]
    assert data["upcoming_assignments"][0]["submission_count"] == 1
    assert [c["course_name"] for c in data["today_classes"]] == ["Math"]
    assert data["today_classes"][0]["period_label"] == "Period 3"


def test_student_dashboard(db, factory, school):
    math, alice = school["math"], school["alice"]
    essay = factory.assignment(math, title="Essay", due=datetime(2025, 9, 30, 23, 59), domains=["LINGUISTIC"])
    missed = factory.assignment(math, title="Missed", due=datetime(2025, 9, 10, 23, 59))
    done = factory.assignment(math, title="Done", due=datetime(2025, 9, 5, 23, 59))
    factory.assignment(math, title="Quiz", due=datetime(2025, 9, 20, 23, 59), type="QUIZ")
    factory.submission(essay, alice, grade=80, submitted_at=datetime(2025, 9, 12, 9, 0))
    factory.submission(done, alice, grade=60, submitted_at=datetime(2025, 9, 4, 9, 0))
    factory.attendance(math, alice, AttendanceStatus.PRESENT, day=date(2025, 9, 1), period=3)
    factory.attendance(math, alice, AttendanceStatus.ABSENT, day=date(2025, 9, 8), period=3)

    data = get_student_dashboard(db, alice, today=MONDAY, now=NOW)

    assert [s["course_name"] for s in data["today_schedule"]] == ["Math"]
    deadlines = [(d["title"], d["is_overdue"]) for d in data["upcoming_deadlines"]]
    assert deadlines == [("Missed", True), ("Essay", False)]
    assert missed.id in {d["id"] for d in data["upcoming_deadlines"]}
    assert [g["assignment_title"] for g in data["recent_grades"]] == ["Essay", "Done"]
    assert data["attendance_pulse"] == 50
    assert data["top_domain"] == {"domain": "LINGUISTIC", "score": 80, "count": 1}


def test_student_dashboard_without_activity(db, school):
    data = get_student_dashboard(db, school["bob"], today=MONDAY, now=NOW)
    assert data["today_schedule"] == []
    assert data["attendance_pulse"] == 100
    assert data["top_domain"] is None


def test_homeroom_dashboard(client, factory, school, auth):
    teacher, alice, bob = school["teacher"], school["alice"], school["bob"]
    factory.homeroom("1-B", school["term"], teacher, students=[bob])
    factory.homeroom("1-A", school["term"], teacher, students=[alice, bob])
    old = factory.term(name="2024/2025", active=False, start=date(2024, 8, 1), end=date(2025, 1, 31))
    factory.homeroom("0-A", old, teacher, students=[alice])

    data = client.get("/v1/dashboards/homeroom", headers=auth(teacher)).json()["data"]
    assert [(c["name"], c["student_count"]) for c in data] == [("1-A", 2), ("1-B", 1)]

    detail = client.get(f"/v1/dashboards/homeroom/classes/{data[0]['id']}", headers=auth(teacher)).json()["data"]
    assert [s["name"] for s in detail["students"]] == ["Alice", "Bob"]


def test_homeroom_dashboard_counts_only_live_students(client, factory, school, auth):
    teacher, bob = school["teacher"], school["bob"]
    factory.homeroom("1-A", school["term"], teacher, students=[school["alice"], bob])
    bob.soft_delete()
    factory.db.commit()

    data = client.get("/v1/dashboards/homeroom", headers=auth(teacher)).json()["data"]
    assert [(c["name"], c["student_count"]) for c in data] == [("1-A", 1)]
