from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, Table
from sqlalchemy.orm import relationship

from database.db import Base
from models.base import utcnow


# ✅ 대화방 참여자 (N:M)
conversation_participants = Table(
    "conversation_participants",
    Base.metadata,
    Column("conversation_id", Integer, ForeignKey("conversations.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)

# ✅ 메시지 읽음 표시 (N:M)
message_reads = Table(
    "message_reads",
    Base.metadata,
    Column("message_id", Integer, ForeignKey("messages.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Conversation(Base):
    __tablename__ = "conversations"  # 1:1 / 그룹 대화방

    id = Column(Integer, primary_key=True, index=True)
    initiator_id = Column(Integer, ForeignKey("users.id"))              # 대화 시작자
    created_at = Column(DateTime, default=utcnow)
    last_message_at = Column(DateTime, default=utcnow, index=True)      # 목록 정렬 기준

    participants = relationship("User", secondary=conversation_participants)
    messages = relationship("Message", back_populates="conversation", order_by="Message.created_at")

    @property
    def participant_ids(self) -> set:
        return {u.id for u in self.participants}


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")
    read_by = relationship("User", secondary=message_reads)

    @property
    def read_by_ids(self) -> set:
        return {u.id for u in self.read_by}
