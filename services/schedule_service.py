"""
services/schedule_service.py

- 관리자 시간표 관리
  1) 교사별 현재 학기 시간표 조회
  2) 슬롯 단건 배정/해제
  3) 교사 시간표 전체 교체 저장 (충돌 수업이 하나라도 있으면 전체 거부)
  4) 특정 슬롯에 배치하면 충돌하는 수업 목록
  5) 전체(마스터) 시간표
- 슬롯 삭제는 항상 소프트 삭제
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from models.courses import Course
from models.schedules import Schedule
from models.users import User
from services.concurrency import bump_version
from services.course_queries import teacher_active_courses, in_active_term
from services.errors import NotFoundError, ValidationFailedError, ScheduleConflictError
from services.schedule_conflict import check_course_schedule_update_conflict, StudentConflict
from utils.schedule_labels import describe_slot

logger = logging.getLogger(__name__)


def conflict_message(conflict: StudentConflict) -> str:
    c = conflict.conflict
    return (
        f"Conflict for student {conflict.student_name} with {c.course_name} "
        f"on {describe_slot(c.day_of_week, c.period)}"
    )


def _get_teacher(db: Session, teacher_id: int) -> User:
    teacher = db.query(User).filter(User.id == teacher_id, User.live()).first()
    if teacher is None:
        raise NotFoundError("Teacher not found")
    return teacher


def _slot_dict(slot: Schedule) -> dict:
    return {"id": slot.id, "day_of_week": slot.day_of_week, "period": slot.period}


# =========================================================
# 1) 조회
# =========================================================

def get_teacher_schedule(db: Session, teacher_id: int) -> List[dict]:
    _get_teacher(db, teacher_id)
    courses = teacher_active_courses(db, teacher_id).all()
    return [
        {
            "course_id": c.id,
            "course_name": c.name,
            "class_name": c.class_.name if c.class_ else None,
            "subject_name": c.subject.name if c.subject else None,
            "term": c.term.display_name if c.term else None,
            "version": c.version,
            "slots": [_slot_dict(s) for s in c.live_schedules],
        }
        for c in courses
    ]


def get_master_schedule(db: Session) -> List[dict]:
    slots = (
        db.query(Schedule)
        .join(Course, Course.id == Schedule.course_id)
        .filter(Schedule.live(), Course.live(), in_active_term())
        .order_by(Schedule.day_of_week, Schedule.period, Schedule.id)
        .all()
    )
    return [
        {
            **_slot_dict(s),
            "course_id": s.course.id,
            "course_name": s.course.name,
            "teacher_id": s.course.teacher_id,
            "teacher_name": s.course.teacher.name if s.course.teacher else None,
            "class_name": s.course.class_.name if s.course.class_ else None,
            "subject_name": s.course.subject.name if s.course.subject else None,
        }
        for s in slots
    ]


def get_conflicting_courses(db: Session, teacher_id: int, day: int, period: int) -> List[int]:
    """해당 슬롯에 배치하면 수강생 충돌이 나는 교사 수업 id 목록"""
    courses = teacher_active_courses(db, teacher_id).all()
    return [
        c.id for c in courses
        if check_course_schedule_update_conflict(db, c.id, [(day, period)])
    ]


# =========================================================
# 2) 슬롯 단건 배정/해제
# =========================================================

def _find_teacher_slot(db: Session, teacher_id: int, day: int, period: int) -> Optional[Schedule]:
    return (
        db.query(Schedule)
        .join(Course, Course.id == Schedule.course_id)
        .filter(
            Schedule.day_of_week == day,
            Schedule.period == period,
            Schedule.live(),
            Course.teacher_id == teacher_id,
            Course.live(),
            in_active_term(),
        )
        .first()
    )


def update_slot(db: Session, teacher_id: int, day: int, period: int, course_id: Optional[int]) -> dict:
    """
    - course_id 가 있으면 해당 슬롯에 배정 (기존 슬롯이 있으면 수업만 교체)
    - course_id 가 None 이면 기존 슬롯 해제
    """
    _get_teacher(db, teacher_id)
    existing = _find_teacher_slot(db, teacher_id, day, period)

    if course_id is None:
        if existing is not None:
            bump_version(db, Course, existing.course_id, existing.course.version)
            existing.soft_delete()
            db.commit()
            logger.info(f"시간표 슬롯 해제: teacher={teacher_id}, {describe_slot(day, period)}")
        return {"action": "removed" if existing is not None else "none"}

    course = teacher_active_courses(db, teacher_id).filter(Course.id == course_id).first()
    if course is None:
        raise ValidationFailedError("Course does not belong to this teacher's active term")
    course_version = course.version

    conflicts = check_course_schedule_update_conflict(db, course.id, [(day, period)])
    if conflicts:
        message = conflict_message(conflicts[0])
        logger.warning(f"시간표 슬롯 배정 거부: teacher={teacher_id}, course={course_id}, {message}")
        raise ScheduleConflictError(message, details=[c.to_dict() for c in conflicts])

    bump_version(db, Course, course.id, course_version)
    if existing is not None:
        if existing.course_id != course.id:
            bump_version(db, Course, existing.course_id, existing.course.version)
        existing.course_id = course.id
        action = "updated"
    else:
        db.add(Schedule(course_id=course.id, day_of_week=day, period=period))
        action = "created"
    db.commit()

    logger.info(f"시간표 슬롯 배정: teacher={teacher_id}, course={course_id}, {describe_slot(day, period)}")
    return {"action": action}


# =========================================================
# 3) 교사 시간표 전체 저장
# =========================================================

def save_teacher_schedule(db: Session, teacher_id: int, slots: List[Tuple[int, int, int]]) -> dict:
    """
    slots: (day, period, course_id) 목록
    - 같은 (day, period) 가 여러 번 오면 마지막 값 사용
    - 수업별로 묶어 충돌 검사 → 하나라도 있으면 아무것도 바꾸지 않음
    - 새 목록에 없는 기존 슬롯은 소프트 삭제, 수업이 바뀐 슬롯은 재지정, 나머지는 생성
    """
    _get_teacher(db, teacher_id)
    courses = {c.id: c for c in teacher_active_courses(db, teacher_id).all()}
    versions = {cid: c.version for cid, c in courses.items()}

    desired: "OrderedDict[Tuple[int, int], int]" = OrderedDict()
    for day, period, course_id in slots:
        if course_id not in courses:
            raise ValidationFailedError(f"Course {course_id} does not belong to this teacher's active term")
        desired[(day, period)] = course_id

    by_course: Dict[int, List[Tuple[int, int]]] = OrderedDict()
    for (day, period), course_id in desired.items():
        by_course.setdefault(course_id, []).append((day, period))

    details = []
    for course_id, course_slots in by_course.items():
        conflicts = check_course_schedule_update_conflict(db, course_id, course_slots)
        if conflicts:
            details.append(conflict_message(conflicts[0]))

    if details:
        logger.warning(f"교사 시간표 저장 거부: teacher={teacher_id}, conflicts={len(details)}")
        raise ScheduleConflictError("Schedule conflicts detected", details=details)

    touched = set()
    remaining = OrderedDict(desired)
    for course in courses.values():
        for slot in course.live_schedules:
            key = (slot.day_of_week, slot.period)
            if key in remaining:
                new_course_id = remaining.pop(key)
                if slot.course_id != new_course_id:
                    touched.update({slot.course_id, new_course_id})
                    slot.course_id = new_course_id
            else:
                slot.soft_delete()
                touched.add(slot.course_id)

    for (day, period), course_id in remaining.items():
        db.add(Schedule(course_id=course_id, day_of_week=day, period=period))
        touched.add(course_id)

    for course_id in sorted(touched):
        bump_version(db, Course, course_id, versions[course_id])
    db.commit()

    logger.info(f"교사 시간표 저장: teacher={teacher_id}, slots={len(desired)}, touched_courses={len(touched)}")
    return {"slots": len(desired), "courses_updated": len(touched)}
