import pytest

from models.courses import Course
from models.enums import Role
from services.concurrency import bump_version
from services.errors import StaleWriteError


def test_enroll_student(client, db, school, auth):
    science, bob = school["science"], school["bob"]
    res = client.post(f"/v1/courses/{science.id}/students", json={"student_id": bob.id}, headers=auth(school["admin"]))
    assert res.status_code == 200
    assert res.json()["success"] is True

    db.expire_all()
    assert bob.id in science.student_ids
    assert science.version == 1
    assert bob.version == 1


def test_already_enrolled_is_rejected(client, school, auth):
    math, alice = school["math"], school["alice"]
    res = client.post(f"/v1/courses/{math.id}/students", json={"student_id": alice.id}, headers=auth(school["admin"]))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_FAILED"


def test_schedule_conflict_is_rejected(client, db, factory, school, auth):
    chem = factory.course("Chemistry", school["teacher"], school["term"], slots=[(1, 3)])
    res = client.post(f"/v1/courses/{chem.id}/students", json={"student_id": school["alice"].id}, headers=auth(school["admin"]))

    assert res.status_code == 409
    body = res.json()["error"]
    assert body["code"] == "SCHEDULE_CONFLICT"
    assert body["message"] == "Schedule conflict with Math on Monday Period 3"
    assert body["details"] == [{"course_name": "Math", "day_of_week": 1, "period": 3}]

    db.expire_all()
    assert school["alice"].id not in chem.student_ids


def test_unknown_student_is_not_found(client, school, auth):
    res = client.post(f"/v1/courses/{school['math'].id}/students", json={"student_id": 9999}, headers=auth(school["admin"]))
    assert res.status_code == 404


def test_enrollment_requires_admin(client, school, auth):
    res = client.post(
        f"/v1/courses/{school['science'].id}/students",
        json={"student_id": school["bob"].id},
        headers=auth(school["teacher"]),
    )
    assert res.status_code == 403


def test_stale_version_is_refused(db, school):
    math = school["math"]
    seen = math.version
    bump_version(db, Course, math.id, seen)      # 다른 요청이 먼저 반영
    db.commit()
    with pytest.raises(StaleWriteError):
        bump_version(db, Course, math.id, seen)


def test_enroll_class_all_or_nothing(client, db, factory, school, auth):
    term, teacher = school["term"], school["teacher"]
    carol = factory.user("Carol", Role.STUDENT)
    homeroom = factory.homeroom("10-A", term, teacher, students=[school["alice"], school["bob"], carol])
    chem = factory.course("Chemistry", teacher, term, slots=[(1, 3)])

    res = client.post(f"/v1/courses/{chem.id}/classes/{homeroom.id}", headers=auth(school["admin"]))
    assert res.status_code == 409
    details = res.json()["error"]["details"]
    assert [d["student_name"] for d in details] == ["Alice"]

    db.expire_all()
    assert chem.student_ids == set()


def test_enroll_class_skips_already_enrolled(client, db, factory, school, auth):
    term, teacher = school["term"], school["teacher"]
    homeroom = factory.homeroom("10-B", term, teacher, students=[school["alice"], school["bob"]])
    science = school["science"]
    science.students = [school["alice"]]
    db.commit()

    res = client.post(f"/v1/courses/{science.id}/classes/{homeroom.id}", headers=auth(school["admin"]))
    assert res.status_code == 200
    assert res.json()["data"]["enrolled"] == 1

    res = client.post(f"/v1/courses/{science.id}/classes/{homeroom.id}", headers=auth(school["admin"]))
    assert res.json()["data"]["enrolled"] == 0
    assert "already enrolled" in res.json()["message"]


def test_remove_student(client, db, school, auth):
    math, alice = school["math"], school["alice"]
    res = client.delete(f"/v1/courses/{math.id}/students/{alice.id}", headers=auth(school["admin"]))
    assert res.status_code == 200

    db.expire_all()
    assert alice.id not in math.student_ids

    res = client.delete(f"/v1/courses/{math.id}/students/{alice.id}", headers=auth(school["admin"]))
    assert res.status_code == 404
