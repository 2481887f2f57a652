from datetime import date

from models.schedules import Schedule
from services.schedule_conflict import (
    CourseSlots, ScheduleConflict, find_first_conflict, normalize_slots, slots_collide,
    check_student_schedule_conflict, check_course_schedule_update_conflict,
)


# =========================================================
# 순수 함수
# =========================================================

def test_slots_collide_needs_day_and_period():
    assert slots_collide((1, 3), (1, 3))
    assert not slots_collide((1, 3), (2, 3))
    assert not slots_collide((1, 3), (1, 4))


def test_first_conflict_follows_iteration_order():
    others = [
        CourseSlots(course_id=10, course_name="Art", slots=((2, 1),)),
        CourseSlots(course_id=11, course_name="History", slots=((1, 3), (2, 1))),
    ]
    conflict = find_first_conflict([(1, 3), (2, 1)], others)
    # 첫 대상 슬롯 (1, 3) 이 History 와 먼저 충돌
    assert conflict == ScheduleConflict(course_name="History", day_of_week=1, period=3)


def test_no_target_slots_means_no_conflict():
    others = [CourseSlots(course_id=1, course_name="Art", slots=((1, 3),))]
    assert find_first_conflict([], others) is None


def test_normalize_slots_accepts_several_shapes():
    class Slot:
        day, period = 4, 7

    assert normalize_slots([(1, 2), {"day": 3, "period": 0}, Slot()]) == [(1, 2), (3, 0), (4, 7)]


# =========================================================
# 수강 신청 방향
# =========================================================

def test_course_without_schedule_never_conflicts(db, factory, school):
    empty = factory.course("Homeroom", school["teacher"], school["term"])
    assert check_student_schedule_conflict(db, school["alice"].id, empty.id) is None


def test_same_slot_same_term_conflicts(db, factory, school):
    chem = factory.course("Chemistry", school["teacher"], school["term"], slots=[(1, 3)])
    conflict = check_student_schedule_conflict(db, school["alice"].id, chem.id)
    assert conflict == ScheduleConflict(course_name="Math", day_of_week=1, period=3)
    assert conflict.to_dict() == {"course_name": "Math", "day_of_week": 1, "period": 3}


def test_other_term_courses_are_ignored(db, factory, school):
    old_term = factory.term(name="2024/2025", type="EVEN", active=False,
                            start=date(2025, 2, 1), end=date(2025, 6, 30))
    factory.course("Old Math", school["teacher"], old_term, slots=[(2, 2)], students=[school["alice"]])
    assert check_student_schedule_conflict(db, school["alice"].id, school["science"].id) is None


def test_soft_deleted_slots_and_courses_are_ignored(db, factory, school):
    chem = factory.course("Chemistry", school["teacher"], school["term"], slots=[(1, 3)])

    slot = db.query(Schedule).filter(Schedule.course_id == school["math"].id).one()
    slot.soft_delete()
    db.commit()
    assert check_student_schedule_conflict(db, school["alice"].id, chem.id) is None

    chem.soft_delete()
    db.commit()
    assert check_student_schedule_conflict(db, school["alice"].id, chem.id) is None


def test_missing_course_is_not_an_error(db, school):
    assert check_student_schedule_conflict(db, school["alice"].id, 9999) is None


# =========================================================
# 시간표 수정 방향
# =========================================================

def test_update_reports_each_student_once(db, factory, school):
    teacher, term, alice, bob = school["teacher"], school["term"], school["alice"], school["bob"]
    factory.course("Music", teacher, term, slots=[(3, 1), (3, 2)], students=[alice, bob])
    art = factory.course("Art", teacher, term, slots=[(5, 5)], students=[alice, bob])

    # Art 를 (1,3) (3,1) (3,2) 로 옮기면 Alice 는 Math/Music 두 과목과, Bob 은 Music 과 충돌
    conflicts = check_course_schedule_update_conflict(db, art.id, [(1, 3), (3, 1), (3, 2)])
    names = [c.student_name for c in conflicts]
    assert sorted(names) == ["Alice", "Bob"]

    by_name = {c.student_name: c.conflict for c in conflicts}
    assert by_name["Alice"] == ScheduleConflict(course_name="Math", day_of_week=1, period=3)
    assert by_name["Bob"].course_name == "Music"


def test_update_with_no_students_is_empty(db, school):
    assert check_course_schedule_update_conflict(db, school["science"].id, [(1, 3)]) == []


def test_update_to_free_slot_is_empty(db, factory, school):
    assert check_course_schedule_update_conflict(db, school["math"].id, [{"day": 4, "period": 4}]) == []


def test_update_ignores_the_course_itself(db, school):
    # Math 를 자기 자신의 기존 슬롯으로 다시 저장해도 충돌 아님
    assert check_course_schedule_update_conflict(db, school["math"].id, [(1, 3)]) == []
