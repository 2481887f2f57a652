from models.attendance import Attendance
from models.enums import AttendanceStatus, Role

MONDAY = "2025-09-01"


def _save(client, auth, user, course, records, period=3, topic="Fractions", **extra):
    body = {"date": MONDAY, "period": period, "topic": topic, "records": records, **extra}
    return client.put(f"/v1/attendance/courses/{course.id}/sessions", json=body, headers=auth(user))


def test_save_session_upserts(client, db, school, auth):
    teacher, math, alice = school["teacher"], school["math"], school["alice"]

    res = _save(client, auth, teacher, math, [{"student_id": alice.id, "status": "PRESENT"}])
    assert res.status_code == 200
    assert res.json()["data"] == {"periods": [3], "created": 1, "updated": 0}

    res = _save(client, auth, teacher, math, [{"student_id": alice.id, "status": "ABSENT"}])
    assert res.json()["data"] == {"periods": [3], "created": 0, "updated": 1}

    records = db.query(Attendance).filter(Attendance.course_id == math.id).all()
    assert [r.status for r in records] == ["ABSENT"]

    session = client.get(
        f"/v1/attendance/courses/{math.id}/sessions",
        params={"date": MONDAY, "period": 3},
        headers=auth(teacher),
    ).json()["data"]
    assert session["topic"] == "Fractions"
    assert session["period_label"] == "Period 3"
    assert session["students"][0]["status"] == "ABSENT"


def test_apply_to_all_sessions_of_the_day(client, factory, school, auth):
    teacher, alice = school["teacher"], school["alice"]
    double = factory.course("Geometry", teacher, school["term"], slots=[(1, 4), (1, 5)], students=[alice])

    res = _save(client, auth, teacher, double, [{"student_id": alice.id, "status": "PRESENT"}],
                period=4, apply_to_all_sessions=True)
    assert res.json()["data"] == {"periods": [4, 5], "created": 2, "updated": 0}


def test_save_rejects_students_not_enrolled(client, school, auth):
    res = _save(client, auth, school["teacher"], school["math"], [{"student_id": school["bob"].id, "status": "PRESENT"}])
    assert res.status_code == 400


def test_other_teacher_cannot_take_attendance(client, factory, school, auth):
    stranger = factory.user("Teacher Lee", Role.SUBJECT_TEACHER)
    res = _save(client, auth, stranger, school["math"], [{"student_id": school["alice"].id, "status": "PRESENT"}])
    assert res.status_code == 403


def test_skip_and_unskip_session(client, db, school, auth):
    teacher, math = school["teacher"], school["math"]
    url = f"/v1/attendance/courses/{math.id}/sessions/skip"

    res = client.post(url, json={"date": MONDAY, "period": 3}, headers=auth(teacher))
    assert res.json()["data"] == {"skipped": 1}

    stats = client.get(f"/v1/attendance/courses/{math.id}/stats", headers=auth(teacher)).json()["data"]
    alice_stats = stats["students"][0]
    assert alice_stats["skipped_count"] == 1
    assert alice_stats["total_sessions"] == 0
    assert alice_stats["attendance_percentage"] == 100.0

    res = client.delete(url, params={"date": MONDAY, "period": 3}, headers=auth(teacher))
    assert res.json()["data"] == {"removed": 1}

    remaining = db.query(Attendance).filter(Attendance.course_id == math.id, Attendance.live()).count()
    assert remaining == 0


def test_stats_and_attendance_score(client, factory, school, auth):
    from datetime import date
    math, alice = school["math"], school["alice"]
    statuses = [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED, AttendanceStatus.ABSENT]
    for i, status in enumerate(statuses):
        factory.attendance(math, alice, status, day=date(2025, 9, 1 + 7 * i), period=3)
    factory.attendance(math, alice, AttendanceStatus.PENDING, day=date(2025, 9, 29), period=3)

    stats = client.get(f"/v1/attendance/courses/{math.id}/stats", headers=auth(school["teacher"])).json()["data"]
    row = stats["students"][0]
    assert row["present_count"] == 1
    assert row["absent_count"] == 2
    assert row["excused_count"] == 1
    assert row["total_sessions"] == 4
    assert row["attendance_percentage"] == 50.0
    assert row["attendance_score"] == 5.0


def test_pool_score_update(client, db, school, auth):
    math = school["math"]
    url = f"/v1/attendance/courses/{math.id}/pool-score"

    res = client.put(url, json={"score": -1}, headers=auth(school["teacher"]))
    assert res.status_code == 422

    res = client.put(url, json={"score": 15}, headers=auth(school["teacher"]))
    assert res.status_code == 200
    db.expire_all()
    assert math.attendance_pool_score == 15


def test_daily_schedule_respects_term_dates(client, school, auth):
    teacher, math, alice = school["teacher"], school["math"], school["alice"]
    _save(client, auth, teacher, math, [{"student_id": alice.id, "status": "PRESENT"}])

    daily = client.get("/v1/attendance/teachers/me/daily", params={"date": MONDAY}, headers=auth(teacher)).json()["data"]
    assert [d["course_name"] for d in daily] == ["Math"]
    assert daily[0]["is_attendance_taken"] is True
    assert daily[0]["is_skipped"] is False
    assert daily[0]["topic"] == "Fractions"

    # 학기 종료 이후 월요일
    after = client.get("/v1/attendance/teachers/me/daily", params={"date": "2026-03-02"}, headers=auth(teacher))
    assert after.json()["data"] == []


def test_skip_all_sessions_for_a_day(client, school, auth):
    teacher = school["teacher"]
    res = client.post("/v1/attendance/teachers/me/daily/skip", params={"date": MONDAY}, headers=auth(teacher))
    assert res.json()["data"] == {"skipped_sessions": 1}

    daily = client.get("/v1/attendance/teachers/me/daily", params={"date": MONDAY}, headers=auth(teacher)).json()["data"]
    assert daily[0]["is_skipped"] is True

    # 수업 없는 날 (토요일)
    res = client.post("/v1/attendance/teachers/me/daily/skip", params={"date": "2025-09-06"}, headers=auth(teacher))
    assert res.json()["data"] == {"skipped_sessions": 0}
