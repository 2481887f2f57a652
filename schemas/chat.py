from pydantic import BaseModel, Field
from typing import List


# ✅ 대화방 생성 요청 (요청자는 자동 포함)
class ConversationCreate(BaseModel):
    participant_ids: List[int] = Field(..., min_length=1)


# ✅ 메시지 전송 요청
class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
