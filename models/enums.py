import enum


# ✅ 사용자 역할 (한 사용자가 여러 역할을 가질 수 있음)
class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    SUBJECT_TEACHER = "SUBJECT_TEACHER"
    HOMEROOM_TEACHER = "HOMEROOM_TEACHER"
    STUDENT = "STUDENT"


TEACHER_ROLES = (Role.SUBJECT_TEACHER, Role.HOMEROOM_TEACHER)


# ✅ 학기 구분 (홀수/짝수 학기)
class TermType(str, enum.Enum):
    ODD = "ODD"
    EVEN = "EVEN"


# ✅ 과제 유형
class AssignmentType(str, enum.Enum):
    SUBMISSION = "SUBMISSION"
    QUIZ = "QUIZ"


# ✅ 출결 상태
#    - PENDING: 주제만 기록되고 출결은 아직 입력 전
#    - SKIPPED: 수업 자체가 진행되지 않음 (출석률 분모에서 제외)
class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"
    SKIPPED = "SKIPPED"
    PENDING = "PENDING"


ATTENDED_STATUSES = (AttendanceStatus.PRESENT.value, AttendanceStatus.EXCUSED.value)
UNCOUNTED_STATUSES = (AttendanceStatus.SKIPPED.value, AttendanceStatus.PENDING.value)


# ✅ 학습 프로필 영역 (고정 6개)
class IntelligenceDomain(str, enum.Enum):
    LINGUISTIC = "LINGUISTIC"
    LOGICAL_MATHEMATICAL = "LOGICAL_MATHEMATICAL"
    SCIENTIFIC = "SCIENTIFIC"
    SOCIAL = "SOCIAL"
    ARTISTIC = "ARTISTIC"
    KINESTHETIC = "KINESTHETIC"
