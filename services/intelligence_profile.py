"""
services/intelligence_profile.py

- 채점된 제출물을 고정 6개 학습 영역으로 나눠 영역별 평균 점수/활동 수 계산 (레이더 차트용)
- 영역 태그 결정 규칙 (순서대로 조회, 상속 아님)
  1) 과제 자체의 intelligence_types 가 있으면 그것
  2) 없으면 수업 과목(subject)의 intelligence_types
  3) 둘 다 없으면 어떤 영역에도 반영하지 않음
- 결과는 항상 6개 영역 전체를 포함하고 점수 내림차순 정렬
"""

import logging
from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional, Sequence

from models.enums import IntelligenceDomain
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)

DOMAINS = [d.value for d in IntelligenceDomain]


@dataclass(frozen=True)
class GradedWork:
    grade: float
    assignment_domains: Sequence[str] = ()
    subject_domains: Sequence[str] = ()


@dataclass
class DomainScore:
    domain: str
    score: int
    count: int

    def to_dict(self) -> dict:
        return asdict(self)


def resolve_domains(assignment_domains: Optional[Sequence[str]], subject_domains: Optional[Sequence[str]]) -> List[str]:
    if assignment_domains:
        return list(assignment_domains)
    if subject_domains:
        return list(subject_domains)
    return []


def from_submission(submission) -> GradedWork:
    """Submission ORM 객체 (assignment → course → subject 로딩 필요) → GradedWork"""
    assignment = submission.assignment
    subject = assignment.course.subject if assignment.course else None
    return GradedWork(
        grade=submission.grade,
        assignment_domains=tuple(assignment.intelligence_types or ()),
        subject_domains=tuple(subject.intelligence_types or ()) if subject else (),
    )


def compute_intelligence_profile(works: Iterable[GradedWork]) -> List[DomainScore]:
    buckets = {domain: {"total": 0.0, "count": 0} for domain in DOMAINS}

    for work in works:
        for domain in resolve_domains(work.assignment_domains, work.subject_domains):
            bucket = buckets.get(domain)
            if bucket is None:
                logger.debug(f"알 수 없는 학습 영역 태그 무시: {domain}")
                continue
            bucket["total"] += work.grade
            bucket["count"] += 1

    profile = [
        DomainScore(
            domain=domain,
            score=int(round_half_up(data["total"] / data["count"])) if data["count"] > 0 else 0,
            count=data["count"],
        )
        for domain, data in buckets.items()
    ]
    return sorted(profile, key=lambda d: d.score, reverse=True)
