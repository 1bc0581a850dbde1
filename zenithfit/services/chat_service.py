"""
Coach conversations: bookkeeping of independent chat threads and the
channel that carries one streamed model reply from the AI service to its
single consumer.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from zenithfit.schemas.chat import DEFAULT_CHAT_TITLE, ChatMessage, ChatSession
from zenithfit.schemas.common import PersistOutcome
from zenithfit.services.ai_service import AIServiceError
from zenithfit.services.persistence import persist

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 30
FALLBACK_REPLY = "Sorry, I couldn't reach the coach right now. Give it a moment and try again."


class ChatSessionNotFoundError(LookupError):
    pass


def derive_title(text: str) -> str:
    text = text.strip()
    if len(text) <= TITLE_MAX_LENGTH:
        return text
    return text[:TITLE_MAX_LENGTH] + "…"


def history_window(session: ChatSession, limit: int = 10) -> List[Dict[str, str]]:
    """Trailing messages handed to the AI service as conversation context."""
    if limit <= 0:
        return []
    return [{"role": m.role, "text": m.text} for m in session.messages[-limit:]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSessionStore:
    """Ordered set of chat threads with append-only message logs."""

    def __init__(self, sessions: Iterable[ChatSession] = ()):
        self._sessions: Dict[str, ChatSession] = {s.id: s for s in sessions}

    def create_session(self, now: Optional[datetime] = None) -> ChatSession:
        session = ChatSession(
            id=str(uuid4()),
            title=DEFAULT_CHAT_TITLE,
            messages=[],
            last_modified=now or _utcnow(),
        )
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> ChatSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise ChatSessionNotFoundError(session_id) from None

    def list_sessions(self) -> List[ChatSession]:
        return sorted(self._sessions.values(), key=lambda s: s.last_modified, reverse=True)

    def append_turn(
        self,
        session_id: str,
        user_text: str,
        model_text: str,
        now: Optional[datetime] = None,
        model_message_id: Optional[str] = None,
    ) -> Tuple[ChatMessage, ChatMessage]:
        """Append one user/model pair and refresh the title and lastModified."""
        session = self.get(session_id)
        now = now or _utcnow()

        user_msg = ChatMessage(id=str(uuid4()), role="user", text=user_text, timestamp=now)
        model_msg = ChatMessage(id=model_message_id or str(uuid4()), role="model", text=model_text, timestamp=now)

        if not session.messages and session.title == DEFAULT_CHAT_TITLE:
            session.title = derive_title(user_text)
        session.messages.extend([user_msg, model_msg])
        session.last_modified = now
        return user_msg, model_msg


CommitTurn = Callable[[str, str, str, str], Awaitable[object]]

_DONE = object()


class _StreamFailed:
    def __init__(self, error: Exception):
        self.error = error


class TurnStream:
    """
    Carries the chunks of one model reply, scoped to (session_id, message_id).

    A producer task pumps the AI stream into a queue; iterating the TurnStream
    is the only way to consume it. Once the AI stream ends the accumulated text
    is handed to `commit(session_id, message_id, user_text, model_text)`
    exactly once. If the consumer stops early the producer is cancelled and
    nothing is committed.
    """

    def __init__(
        self,
        session_id: str,
        user_text: str,
        chunks: AsyncIterator[str],
        commit: CommitTurn,
        message_id: Optional[str] = None,
        fallback_text: str = FALLBACK_REPLY,
    ):
        self.session_id = session_id
        self.message_id = message_id or str(uuid4())
        self.user_text = user_text
        self.text = ""
        self.failed = False
        self.committed = False
        self._chunks = chunks
        self._commit = commit
        self._fallback_text = fallback_text
        self._queue: asyncio.Queue = asyncio.Queue()
        self._producer: Optional[asyncio.Task] = None

    async def _pump(self) -> None:
        try:
            async for chunk in self._chunks:
                if chunk:
                    await self._queue.put(chunk)
        except AIServiceError as e:
            await self._queue.put(_StreamFailed(e))
        except Exception as e:
            logger.error("Coach stream for session %s broke: %s", self.session_id, e, exc_info=True)
            await self._queue.put(_StreamFailed(e))
        finally:
            await self._queue.put(_DONE)

    async def __aiter__(self) -> AsyncIterator[str]:
        if self._producer is not None:
            raise RuntimeError("TurnStream can only be consumed once")
        self._producer = asyncio.create_task(self._pump())
        finished = False
        try:
            while True:
                item = await self._queue.get()
                if item is _DONE:
                    finished = True
                    break
                if isinstance(item, _StreamFailed):
                    logger.warning("Coach stream failed for session %s: %s", self.session_id, item.error)
                    self.failed = True
                    chunk = ("\n\n" if self.text else "") + self._fallback_text
                else:
                    chunk = item
                self.text += chunk
                yield chunk
        finally:
            if not finished and not self._producer.done():
                self._producer.cancel()
                logger.info("Coach stream for session %s abandoned, turn discarded", self.session_id)

        await self._producer
        await self._commit(self.session_id, self.message_id, self.user_text, self.text)
        self.committed = True


async def _append_turn(store, session_id: str, message_id: str, user_text: str, model_text: str) -> None:
    session = await store.get_chat_session(session_id)
    if session is None:
        raise ChatSessionNotFoundError(session_id)
    messages = ChatSessionStore([session]).append_turn(
        session_id, user_text, model_text, model_message_id=message_id
    )
    await store.append_chat_turn(session_id, messages, session.title, session.last_modified)


async def commit_turn(store, session_id: str, message_id: str, user_text: str, model_text: str) -> PersistOutcome:
    """
    Store a finished turn: reload the thread, append the user/model pair and
    write it together with the refreshed title and lastModified.

    Database errors anywhere on the way, the reload included, come back as a
    failed outcome.
    """
    try:
        return await persist(store, "chat turn", _append_turn(store, session_id, message_id, user_text, model_text))
    except ChatSessionNotFoundError:
        logger.warning("Chat session %s disappeared before its turn was stored", session_id)
        return PersistOutcome(ok=False, error="Conversation no longer exists")
