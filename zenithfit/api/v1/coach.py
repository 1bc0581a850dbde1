import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from zenithfit.core.config import settings
from zenithfit.core.dependencies import get_ai_service, get_chat_committer, get_document_store
from zenithfit.repositories.document_store import DocumentStore
from zenithfit.schemas.chat import ChatMessageCreate, ChatSession, ChatSessionResponse
from zenithfit.services.ai_service import AIService
from zenithfit.services.chat_service import ChatSessionStore, TurnStream, history_window
from zenithfit.services.persistence import persist

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/sessions", response_model=List[ChatSession])
async def list_sessions(store: DocumentStore = Depends(get_document_store)):
    chats = ChatSessionStore(await store.list_chat_sessions())
    return chats.list_sessions()


@router.post("/sessions", response_model=ChatSessionResponse, status_code=201)
async def create_session(store: DocumentStore = Depends(get_document_store)):
    session = ChatSessionStore().create_session()
    saved = await persist(store, "chat session", store.create_chat_session(session))
    return ChatSessionResponse(session=session, persisted=saved)


@router.post("/sessions/{session_id}/messages")
async def send_message(
    session_id: str,
    message: ChatMessageCreate,
    store: DocumentStore = Depends(get_document_store),
    ai: AIService = Depends(get_ai_service),
    commit=Depends(get_chat_committer),
):
    """
    Stream the coach's reply as plain text chunks.

    The turn (user message + full reply) is saved once the stream ends; a
    client that disconnects early discards the turn.
    """
    profile = await store.get_profile()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Complete onboarding before talking to the coach")

    session = await store.get_chat_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

    user_text = message.text.strip()
    if not user_text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is empty")

    chunks = ai.stream_coach_reply(profile, user_text, history_window(session, settings.CHAT_HISTORY_LIMIT))
    turn = TurnStream(session.id, user_text, chunks, commit)
    logger.info("Streaming coach reply %s for session %s", turn.message_id, session.id)

    return StreamingResponse(
        turn,
        media_type="text/plain; charset=utf-8",
        headers={"X-Chat-Session-Id": session.id, "X-Message-Id": turn.message_id},
    )
