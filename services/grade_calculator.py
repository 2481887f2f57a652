"""
services/grade_calculator.py

- 성적 계산 엔진 (순수 함수, I/O 없음)
- 최종 성적(%) = min(100, round((학생점수 + 가산점 [+ 출석점수]) / 만점합계 * 100, 1))
  - 만점합계가 0 이면 (채점할 과제 없음) 100
- 미제출/미채점 과제도 만점합계에는 포함 (미제출은 불리하게 반영)
- 출석률 = (PRESENT + EXCUSED) / (SKIPPED, PENDING 제외 세션 수), 세션이 없으면 100%
"""

from dataclasses import dataclass, asdict
from typing import Iterable, Mapping, Optional

from models.enums import ATTENDED_STATUSES, UNCOUNTED_STATUSES
from utils.numbers import round_half_up

MAX_GRADE = 100.0


@dataclass
class GradeBreakdown:
    student_points: float = 0.0
    max_points_possible: float = 0.0
    extra_credit_points: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseGrade:
    grade: float                      # 출석 포함 최종 성적
    grade_without_attendance: float   # 출석 제외 성적
    attendance_percentage: int        # 출석률 (정수 %)
    attendance_score: float           # 출석 배점 중 획득 점수
    attendance_pool: float
    breakdown: GradeBreakdown

    def to_dict(self) -> dict:
        data = asdict(self)
        data["breakdown"]["attendance_score"] = self.attendance_score
        data["breakdown"]["attendance_pool"] = self.attendance_pool
        return data


# =========================================================
# 1) 최종 성적
# =========================================================

def compute_grade(breakdown: GradeBreakdown, include_attendance_pool: bool, pool_score: float) -> float:
    if breakdown.max_points_possible == 0:
        return MAX_GRADE

    numerator = breakdown.student_points + breakdown.extra_credit_points
    if include_attendance_pool:
        numerator += pool_score

    raw = round_half_up(numerator * 100 / breakdown.max_points_possible, 1)
    return min(MAX_GRADE, raw)


# =========================================================
# 2) 과제/제출 → 점수 내역
# =========================================================

def earned_points(assignment, submission) -> float:
    """채점된 제출의 획득 점수 (지각 감점 반영). 미채점/미제출은 0"""
    if submission is None or submission.grade is None:
        return 0.0

    points = (submission.grade / 100) * assignment.max_points
    due = assignment.due_date
    penalty = assignment.late_penalty or 0
    if due is not None and submission.submitted_at is not None and submission.submitted_at > due and penalty > 0:
        points -= points * (penalty / 100)
    return points


def build_breakdown(assignments: Iterable, submissions_by_assignment: Mapping[int, Optional[object]]) -> GradeBreakdown:
    """
    학생 1명 × 수업 1개의 점수 내역
    - submissions_by_assignment: assignment.id → 해당 학생의 (살아있는) 제출 or None
    """
    breakdown = GradeBreakdown()
    for assignment in assignments:
        if not assignment.is_extra_credit:
            breakdown.max_points_possible += assignment.max_points

        points = earned_points(assignment, submissions_by_assignment.get(assignment.id))
        if assignment.is_extra_credit:
            breakdown.extra_credit_points += points
        else:
            breakdown.student_points += points
    return breakdown


# =========================================================
# 3) 출석률
# =========================================================

def attendance_ratio(statuses: Iterable[str]) -> float:
    counted = [s for s in statuses if s not in UNCOUNTED_STATUSES]
    if not counted:
        return 1.0
    attended = sum(1 for s in counted if s in ATTENDED_STATUSES)
    return attended / len(counted)


def attendance_percentage(statuses: Iterable[str]) -> int:
    return int(round_half_up(attendance_ratio(statuses) * 100))


# =========================================================
# 4) 수업 성적 요약
# =========================================================

def summarize_course_grade(breakdown: GradeBreakdown, statuses: Iterable[str], attendance_pool: float) -> CourseGrade:
    statuses = list(statuses)
    ratio = attendance_ratio(statuses)
    pool = attendance_pool or 0
    attendance_score = ratio * pool
    return CourseGrade(
        grade=compute_grade(breakdown, True, attendance_score),
        grade_without_attendance=compute_grade(breakdown, False, 0),
        attendance_percentage=attendance_percentage(statuses),
        attendance_score=round_half_up(attendance_score, 2),
        attendance_pool=pool,
        breakdown=breakdown,
    )


def average(values: Iterable[float], digits: int = 1) -> float:
    values = list(values)
    if not values:
        return 0.0
    return round_half_up(sum(values) / len(values), digits)
