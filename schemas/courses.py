from pydantic import BaseModel


# ✅ 수강 신청 요청 바디
class EnrollStudent(BaseModel):
    student_id: int                  # 등록할 학생 ID
