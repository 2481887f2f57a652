from sqlalchemy import Column, Integer, String, JSON
from database.db import Base
from models.base import SoftDeleteMixin


class Subject(SoftDeleteMixin, Base):
    __tablename__ = "subjects"  # 과목 정보 테이블

    id = Column(Integer, primary_key=True, index=True)         # 과목 고유 ID (Primary Key)
    name = Column(String(100), nullable=False)                 # 과목 이름 (예: 수학, 영어)
    code = Column(String(20))                                  # 과목 코드 (예: MATH-1)
    report_name = Column(String(100))                          # 성적표 표기명
    intelligence_types = Column(JSON, default=list)            # 학습 프로필 영역 태그 (과제 태그가 없을 때 대체값)
