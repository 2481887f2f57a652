"""
services/schedule_conflict.py

- 학생 시간표 충돌 검사기
  1) 수강 신청 시: 대상 수업의 슬롯 vs 같은 학기에 학생이 듣는 다른 수업의 슬롯
     → 순회 순서상 첫 번째 충돌 하나만 반환
  2) 수업 시간표 수정 시: 제안 슬롯 vs 수강생 각자의 다른 수업 슬롯
     → 학생당 최대 1건만 보고
- 두 경우 모두 같은 충돌 판정을 사용: (요일, 교시) 일치 + 같은 학기 + 대상 수업 자신 제외
- 수업/학생이 없거나 시간표가 비어 있으면 예외 없이 None / [] 반환
"""

from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from models.courses import Course, course_students

Slot = Tuple[int, int]   # (day_of_week, period)


# =========================================================
# 1) 결과 타입
# =========================================================

@dataclass(frozen=True)
class ScheduleConflict:
    course_name: str
    day_of_week: int
    period: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StudentConflict:
    student_name: str
    conflict: ScheduleConflict

    def to_dict(self) -> dict:
        return {"student_name": self.student_name, "conflict": self.conflict.to_dict()}


@dataclass(frozen=True)
class CourseSlots:
    """충돌 비교 대상 수업 (이름 + 살아있는 슬롯 목록)"""
    course_id: int
    course_name: str
    slots: Tuple[Slot, ...]


# =========================================================
# 2) 순수 함수 (DB 없음)
# =========================================================

def slots_collide(a: Slot, b: Slot) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def find_first_conflict(
    target_slots: Sequence[Slot],
    other_courses: Iterable[CourseSlots],
) -> Optional[ScheduleConflict]:
    """
    대상 슬롯 × 다른 수업 × 그 수업의 슬롯 순서로 돌면서 첫 충돌을 반환
    - 대상 슬롯이 없으면 충돌 불가 → None
    """
    if not target_slots:
        return None
    other_courses = list(other_courses)
    for target in target_slots:
        for other in other_courses:
            for existing in other.slots:
                if slots_collide(target, existing):
                    return ScheduleConflict(
                        course_name=other.course_name,
                        day_of_week=target[0],
                        period=target[1],
                    )
    return None


def normalize_slots(slots) -> List[Slot]:
    """
    제안 슬롯 입력을 (day, period) 튜플로 통일
    - (1, 3) / {"day": 1, "period": 3} / .day .period 속성을 가진 객체 모두 허용
    """
    result = []
    for slot in slots:
        if isinstance(slot, (tuple, list)):
            day, period = slot
        elif isinstance(slot, dict):
            day, period = slot["day"], slot["period"]
        else:
            day, period = slot.day, slot.period
        result.append((int(day), int(period)))
    return result


# =========================================================
# 3) DB 조회 래퍼
# =========================================================

def to_course_slots(course: Course) -> CourseSlots:
    return CourseSlots(
        course_id=course.id,
        course_name=course.name,
        slots=tuple((s.day_of_week, s.period) for s in course.live_schedules),
    )


def get_other_term_courses(db: Session, student_id: int, term_id: int, exclude_course_id: int) -> List[CourseSlots]:
    """학생이 같은 학기에 수강 중인 (대상 수업 제외) 살아있는 수업과 그 슬롯"""
    courses = (
        db.query(Course)
        .join(course_students, course_students.c.course_id == Course.id)
        .filter(course_students.c.student_id == student_id)
        .filter(Course.term_id == term_id)
        .filter(Course.id != exclude_course_id)
        .filter(Course.live())
        .order_by(Course.id)
        .all()
    )
    return [to_course_slots(c) for c in courses]


def check_student_schedule_conflict(db: Session, student_id: int, target_course_id: int) -> Optional[ScheduleConflict]:
    """수강 신청 방향: 대상 수업을 추가하면 학생 시간표가 겹치는가"""
    target = db.query(Course).filter(Course.id == target_course_id, Course.live()).first()
    if target is None:
        return None

    target_slots = [(s.day_of_week, s.period) for s in target.live_schedules]
    if not target_slots:
        return None

    others = get_other_term_courses(db, student_id, target.term_id, target.id)
    return find_first_conflict(target_slots, others)


def check_course_schedule_update_conflict(db: Session, course_id: int, proposed_slots) -> List[StudentConflict]:
    """시간표 수정 방향: 제안 슬롯으로 바꾸면 기존 수강생 중 누가 겹치는가"""
    course = db.query(Course).filter(Course.id == course_id, Course.live()).first()
    if course is None or not course.students:
        return []

    slots = normalize_slots(proposed_slots)
    if not slots:
        return []

    conflicts = []
    for student in course.students:
        others = get_other_term_courses(db, student.id, course.term_id, course.id)
        conflict = find_first_conflict(slots, others)
        if conflict is not None:
            conflicts.append(StudentConflict(student_name=student.name, conflict=conflict))
    return conflicts
