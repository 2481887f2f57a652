"""
services/chat_service.py

- 폴링 기반 메시지 기능 (푸시/전달 보장 없음)
- 대화방 목록은 메시지가 있거나 본인이 시작한 방만 노출
- 보낸 메시지는 보낸 사람이 이미 읽은 것으로 기록
"""

import logging
from typing import Iterable, List

from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from config.settings import settings
from models.base import utcnow
from models.conversations import Conversation, Message, conversation_participants, message_reads
from models.enums import Role
from models.users import User
from services.errors import NotFoundError, PermissionDeniedError, ValidationFailedError

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _participant_dict(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email, "nickname": user.nickname}


def message_to_dict(message: Message) -> dict:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "sender_name": message.sender.name if message.sender else None,
        "content": message.content,
        "created_at": message.created_at.isoformat() if message.created_at else None,
        "read_by_ids": sorted(message.read_by_ids),
    }


def conversation_to_dict(conversation: Conversation, viewer_id: int) -> dict:
    last = conversation.messages[-1] if conversation.messages else None
    return {
        "id": conversation.id,
        "initiator_id": conversation.initiator_id,
        "last_message_at": conversation.last_message_at.isoformat() if conversation.last_message_at else None,
        "participants": [_participant_dict(u) for u in conversation.participants],
        "last_message": message_to_dict(last) if last else None,
        "unread": sum(1 for m in conversation.messages if viewer_id not in m.read_by_ids),
    }


def _get_conversation(db: Session, conversation_id: int, user: User) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if user.id not in conversation.participant_ids and not user.has_role(Role.ADMIN):
        logger.warning(f"대화방 접근 거부: user={user.id}, conversation={conversation_id}")
        raise PermissionDeniedError("Unauthorized")
    return conversation


# =========================================================
# 1) 대화방
# =========================================================

def list_conversations(db: Session, user: User) -> List[dict]:
    conversations = (
        db.query(Conversation)
        .filter(Conversation.participants.any(User.id == user.id))
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
        .all()
    )
    visible = [c for c in conversations if c.messages or c.initiator_id == user.id]
    return [conversation_to_dict(c, user.id) for c in visible]


def list_all_conversations(db: Session, user: User) -> List[dict]:
    """관리자 전용: 전체 대화방"""
    if not user.has_role(Role.ADMIN):
        raise PermissionDeniedError("Unauthorized")
    conversations = db.query(Conversation).order_by(Conversation.last_message_at.desc(), Conversation.id.desc()).all()
    return [conversation_to_dict(c, user.id) for c in conversations]


def create_conversation(db: Session, user: User, participant_ids: Iterable[int]) -> dict:
    """
    - 요청자는 자동으로 참여자에 포함
    - 1:1 대화방이 이미 있으면 새로 만들지 않고 기존 방 반환
    """
    all_ids = set(participant_ids) | {user.id}
    if len(all_ids) < 2:
        raise ValidationFailedError("Need at least 2 participants")

    participants = db.query(User).filter(User.id.in_(all_ids), User.live()).all()
    if len(participants) != len(all_ids):
        raise NotFoundError("Participant not found")

    if len(all_ids) == 2:
        for existing in db.query(Conversation).filter(Conversation.participants.any(User.id == user.id)).all():
            if existing.participant_ids == all_ids:
                return {"conversation_id": existing.id, "created": False}

    conversation = Conversation(initiator_id=user.id, participants=participants)
    db.add(conversation)
    db.commit()
    logger.info(f"대화방 생성: conversation={conversation.id}, participants={sorted(all_ids)}")
    return {"conversation_id": conversation.id, "created": True}


# =========================================================
# 2) 메시지
# =========================================================

def get_messages(db: Session, conversation_id: int, user: User) -> List[dict]:
    conversation = _get_conversation(db, conversation_id, user)
    return [message_to_dict(m) for m in conversation.messages]


def send_message(db: Session, conversation_id: int, user: User, content: str) -> dict:
    conversation = _get_conversation(db, conversation_id, user)
    if user.id not in conversation.participant_ids:
        raise PermissionDeniedError("Only participants can send messages")

    content = (content or "").strip()
    if not content:
        raise ValidationFailedError("Message content is required")

    now = utcnow()
    message = Message(conversation_id=conversation.id, sender_id=user.id, content=content, created_at=now)
    message.read_by.append(user)
    db.add(message)
    conversation.last_message_at = now
    db.commit()
    db.refresh(message)
    return message_to_dict(message)


def mark_as_read(db: Session, conversation_id: int, user: User) -> int:
    """대화방의 안 읽은 메시지를 모두 읽음 처리하고 처리한 개수 반환"""
    conversation = _get_conversation(db, conversation_id, user)
    unread = [m for m in conversation.messages if user.id not in m.read_by_ids]
    for message in unread:
        message.read_by.append(user)
    db.commit()
    logger.debug(f"읽음 처리: conversation={conversation_id}, user={user.id}, count={len(unread)}")
    return len(unread)


def unread_count(db: Session, user: User) -> dict:
    """헤더 알림용 안 읽은 메시지 수 + 클라이언트 폴링 주기"""
    already_read = (
        db.query(message_reads.c.message_id)
        .filter(message_reads.c.user_id == user.id)
    )
    count = (
        db.query(Message)
        .join(conversation_participants, conversation_participants.c.conversation_id == Message.conversation_id)
        .filter(conversation_participants.c.user_id == user.id)
        .filter(Message.id.notin_(already_read))
        .count()
    )
    return {"unread": count, "poll_interval_sec": settings.CHAT_POLL_INTERVAL_SEC}


def search_users(db: Session, user: User, query: str) -> List[dict]:
    if not query or len(query) < 2:
        return []
    pattern = f"%{query}%"
    users = (
        db.query(User)
        .filter(
            User.live(),
            User.id != user.id,
            or_(User.name.ilike(pattern), and_(User.email.isnot(None), User.email.ilike(pattern))),
        )
        .order_by(User.name)
        .limit(SEARCH_LIMIT)
        .all()
    )
    return [dict(_participant_dict(u), roles=sorted(u.role_names)) for u in users]
