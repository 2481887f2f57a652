from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_current_user
from models.users import User
from schemas.chat import ConversationCreate, MessageCreate
from schemas.common import COMMON_ERRORS
from services import chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


# ==========================================================
# [1단계] 대화방
# ==========================================================

# ✅ [READ] 내 대화방 목록 (메시지가 있거나 내가 시작한 방)
@router.get("/conversations", responses=COMMON_ERRORS)
def read_conversations(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": chat_service.list_conversations(db, user)}


# ✅ [READ] 전체 대화방 (관리자)
@router.get("/conversations/all", responses=COMMON_ERRORS)
def read_all_conversations(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": chat_service.list_all_conversations(db, user)}


# ✅ [CREATE] 대화방 생성 (1:1 은 기존 방 재사용)
@router.post("/conversations", responses=COMMON_ERRORS)
def create_conversation(body: ConversationCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    result = chat_service.create_conversation(db, user, body.participant_ids)
    return {"success": True, "data": result}


# ==========================================================
# [2단계] 메시지 (폴링)
# ==========================================================

# ✅ [READ] 메시지 목록
@router.get("/conversations/{conversation_id}/messages", responses=COMMON_ERRORS)
def read_messages(conversation_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": chat_service.get_messages(db, conversation_id, user)}


# ✅ [CREATE] 메시지 전송
@router.post("/conversations/{conversation_id}/messages", responses=COMMON_ERRORS)
def send_message(conversation_id: int, body: MessageCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": chat_service.send_message(db, conversation_id, user, body.content)}


# ✅ [UPDATE] 대화방 읽음 처리
@router.post("/conversations/{conversation_id}/read", responses=COMMON_ERRORS)
def mark_as_read(conversation_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    count = chat_service.mark_as_read(db, conversation_id, user)
    return {"success": True, "data": {"marked": count}}


# ✅ [READ] 안 읽은 메시지 수 + 폴링 주기
@router.get("/unread", responses=COMMON_ERRORS)
def read_unread(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"success": True, "data": chat_service.unread_count(db, user)}


# ✅ [READ] 대화 상대 검색
@router.get("/users", responses=COMMON_ERRORS)
def search_users(
    q: str = Query("", description="이름/이메일 검색어 (2자 이상)"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"success": True, "data": chat_service.search_users(db, user, q)}
