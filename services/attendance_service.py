"""
services/attendance_service.py

- 수업 세션(날짜 + 교시) 단위 출결 관리
  1) 세션 명단 조회 / 출결 저장 (같은 요일 모든 교시에 일괄 적용 옵션)
  2) 세션 휴강(SKIPPED) 처리 / 휴강 취소
  3) 학생별 출결 통계 + 출석 배점 반영 점수
  4) 출석 배점 수정
  5) 교사 일별 수업 목록 (출결 입력 여부 / 휴강 여부)
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from models.attendance import Attendance
from models.courses import Course
from models.enums import AttendanceStatus, Role
from models.schedules import Schedule
from models.users import User
from services.course_queries import get_live_course, in_active_term
from services.errors import PermissionDeniedError, ValidationFailedError
from services.grade_calculator import attendance_ratio
from utils.numbers import round_half_up
from utils.schedule_labels import get_period_label

logger = logging.getLogger(__name__)

SKIPPED_TOPIC = "Session Skipped"


def js_weekday(day: date) -> int:
    """0=일요일 ~ 6=토요일 (파이썬 weekday()는 0=월요일)"""
    return (day.weekday() + 1) % 7


def get_owned_course(db: Session, course_id: int, user: User) -> Course:
    course = get_live_course(db, course_id)
    if course.teacher_id != user.id and not user.has_role(Role.ADMIN):
        logger.warning(f"출결 접근 거부: user={user.id}, course={course_id}")
        raise PermissionDeniedError("Unauthorized")
    return course


def _session_records(db: Session, course_id: int, day: date, period: int) -> List[Attendance]:
    return (
        db.query(Attendance)
        .filter(
            Attendance.course_id == course_id,
            Attendance.date == day,
            Attendance.period == period,
            Attendance.live(),
        )
        .order_by(Attendance.id)
        .all()
    )


def _find_record(db: Session, course_id: int, student_id: int, day: date, period: int) -> Optional[Attendance]:
    return (
        db.query(Attendance)
        .filter(
            Attendance.course_id == course_id,
            Attendance.student_id == student_id,
            Attendance.date == day,
            Attendance.period == period,
            Attendance.live(),
        )
        .first()
    )


# =========================================================
# 1) 세션 명단 / 저장
# =========================================================

def get_session(db: Session, course_id: int, day: date, period: int, user: User) -> dict:
    course = get_owned_course(db, course_id, user)
    records = {r.student_id: r for r in _session_records(db, course.id, day, period)}

    students = []
    for student in course.students:
        record = records.get(student.id)
        students.append({
            "student_id": student.id,
            "student_name": student.name,
            # PENDING 은 아직 입력 전으로 취급
            "status": record.status if record and record.status != AttendanceStatus.PENDING.value else None,
            "record_id": record.id if record else None,
            "excuse_reason": record.excuse_reason if record else None,
        })

    first = next(iter(records.values()), None)
    return {
        "course_id": course.id,
        "course_name": course.name,
        "date": day.isoformat(),
        "period": period,
        "period_label": get_period_label(period),
        "topic": first.topic if first else "",
        "attendance_pool_score": course.attendance_pool_score,
        "students": students,
    }


def save_session(
    db: Session,
    course_id: int,
    day: date,
    period: int,
    topic: Optional[str],
    records: Iterable[dict],
    user: User,
    apply_to_all_sessions: bool = False,
) -> dict:
    """
    records: [{"student_id", "status", "excuse_reason"}]
    - (수업, 학생, 날짜, 교시) 기준 upsert
    - apply_to_all_sessions: 해당 요일의 이 수업 모든 교시에 같은 내용 기록
    """
    course = get_owned_course(db, course_id, user)
    records = list(records)

    enrolled = course.student_ids
    unknown = [r["student_id"] for r in records if r["student_id"] not in enrolled]
    if unknown:
        raise ValidationFailedError(f"Students not enrolled in this course: {unknown}")

    periods = [period]
    if apply_to_all_sessions:
        weekday = js_weekday(day)
        periods = [s.period for s in course.live_schedules if s.day_of_week == weekday] or [period]

    created = updated = 0
    for current_period in periods:
        for record in records:
            status = AttendanceStatus(record["status"]).value
            excuse_reason = record.get("excuse_reason")
            existing = _find_record(db, course.id, record["student_id"], day, current_period)
            if existing is not None:
                if (existing.status, existing.topic, existing.excuse_reason) != (status, topic, excuse_reason):
                    existing.status = status
                    existing.topic = topic
                    existing.excuse_reason = excuse_reason
                    updated += 1
            else:
                db.add(Attendance(
                    course_id=course.id,
                    student_id=record["student_id"],
                    date=day,
                    period=current_period,
                    status=status,
                    topic=topic,
                    excuse_reason=excuse_reason,
                ))
                created += 1
            # 같은 트랜잭션 안에서 다음 조회가 방금 추가한 행을 보도록
            db.flush()
    db.commit()

    logger.info(f"출결 저장: course={course_id}, date={day}, periods={periods}, created={created}, updated={updated}")
    return {"periods": periods, "created": created, "updated": updated}


# =========================================================
# 2) 휴강 / 휴강 취소
# =========================================================

def skip_session(db: Session, course_id: int, day: date, period: int, user: User) -> dict:
    course = get_owned_course(db, course_id, user)
    count = 0
    for student in course.students:
        existing = _find_record(db, course.id, student.id, day, period)
        if existing is not None:
            existing.status = AttendanceStatus.SKIPPED.value
            existing.topic = SKIPPED_TOPIC
            existing.excuse_reason = None
        else:
            db.add(Attendance(
                course_id=course.id,
                student_id=student.id,
                date=day,
                period=period,
                status=AttendanceStatus.SKIPPED.value,
                topic=SKIPPED_TOPIC,
            ))
        count += 1
    db.commit()

    logger.info(f"휴강 처리: course={course_id}, date={day}, period={period}, students={count}")
    return {"skipped": count}


def unskip_session(db: Session, course_id: int, day: date, period: int, user: User) -> dict:
    """세션 기록 전체를 소프트 삭제 (출결 미입력 상태로 되돌림)"""
    course = get_owned_course(db, course_id, user)
    records = _session_records(db, course.id, day, period)
    for record in records:
        record.soft_delete()
    db.commit()

    logger.info(f"휴강 취소: course={course_id}, date={day}, period={period}, records={len(records)}")
    return {"removed": len(records)}


# =========================================================
# 3) 통계 / 출석 배점
# =========================================================

def get_course_stats(db: Session, course_id: int, user: User) -> dict:
    course = get_owned_course(db, course_id, user)
    pool = course.attendance_pool_score or 0

    records = (
        db.query(Attendance.student_id, Attendance.status)
        .filter(
            Attendance.course_id == course.id,
            Attendance.live(),
            Attendance.status != AttendanceStatus.PENDING.value,
        )
        .all()
    )

    stats = []
    for student in course.students:
        statuses = [status for sid, status in records if sid == student.id]
        ratio = attendance_ratio(statuses)
        skipped = statuses.count(AttendanceStatus.SKIPPED.value)
        stats.append({
            "student_id": student.id,
            "student_name": student.name,
            "present_count": statuses.count(AttendanceStatus.PRESENT.value),
            "absent_count": statuses.count(AttendanceStatus.ABSENT.value),
            "excused_count": statuses.count(AttendanceStatus.EXCUSED.value),
            "skipped_count": skipped,
            "total_sessions": len(statuses) - skipped,
            "attendance_percentage": round_half_up(ratio * 100, 1),
            "attendance_score": round_half_up(ratio * pool, 2),
        })

    return {"course_id": course.id, "course_name": course.name, "attendance_pool_score": pool, "students": stats}


def update_pool_score(db: Session, course_id: int, score: float, user: User) -> dict:
    if score < 0:
        raise ValidationFailedError("Attendance pool score must not be negative")
    course = get_owned_course(db, course_id, user)
    course.attendance_pool_score = score
    db.commit()
    logger.info(f"출석 배점 변경: course={course_id}, score={score}")
    return {"course_id": course.id, "attendance_pool_score": score}


# =========================================================
# 4) 교사 일별 수업
# =========================================================

def get_daily_schedule(db: Session, teacher_id: int, day: date) -> List[dict]:
    """해당 요일의 현재 학기 수업 (학기 기간 밖이면 제외) + 출결 입력/휴강 여부"""
    slots = (
        db.query(Schedule)
        .join(Course, Course.id == Schedule.course_id)
        .filter(
            Schedule.day_of_week == js_weekday(day),
            Schedule.live(),
            Course.teacher_id == teacher_id,
            Course.live(),
            in_active_term(),
        )
        .order_by(Schedule.period, Schedule.id)
        .all()
    )

    result = []
    for slot in slots:
        term = slot.course.term
        if term.start_date and day < term.start_date:
            continue
        if term.end_date and day > term.end_date:
            continue

        records = _session_records(db, slot.course_id, day, slot.period)
        result.append({
            "schedule_id": slot.id,
            "course_id": slot.course_id,
            "course_name": slot.course.name,
            "class_name": slot.course.class_.name if slot.course.class_ else None,
            "period": slot.period,
            "period_label": get_period_label(slot.period),
            "is_attendance_taken": any(r.status != AttendanceStatus.PENDING.value for r in records),
            "is_skipped": any(r.status == AttendanceStatus.SKIPPED.value for r in records),
            "topic": next((r.topic for r in records if r.topic), None),
        })
    return result


def skip_all_sessions(db: Session, teacher: User, day: date) -> dict:
    sessions = get_daily_schedule(db, teacher.id, day)
    if not sessions:
        return {"skipped_sessions": 0, "message": "No class sessions found for this date."}

    for session in sessions:
        skip_session(db, session["course_id"], day, session["period"], teacher)
    return {"skipped_sessions": len(sessions), "message": f"Skipped {len(sessions)} sessions."}
