# repository/session_repository.py
from typing import Final, Optional
from uuid import uuid4
from pydantic import ValidationError
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from model.session import ConversationContext
from repository.namespaces import SESSIONS
import logging

KEY_PREFIX: Final[str] = SESSIONS

logger = logging.getLogger(__name__)


class SessionRepository:
    """
    Flow:
    - One JSON ConversationContext per browser session, keyed by session id.
    - TTL refreshed on every read and write so active sessions stay alive.
    - A value that no longer validates is treated as expired.
    """

    def __init__(self, ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}:{session_id}"

    async def create(self, student_id: int) -> ConversationContext:
        ctx = ConversationContext(session_id=uuid4().hex, student_id=student_id)
        await self.put(ctx)
        return ctx

    async def put(self, ctx: ConversationContext) -> None:
        r = await self._client()
        payload = ctx.model_dump_json().encode("utf-8")
        await r.set(self._key(ctx.session_id), payload, ex=self._ttl)

    async def get(self, session_id: str) -> Optional[ConversationContext]:
        if not session_id:
            return None
        r = await self._client()
        raw = await r.get(self._key(session_id))
        if raw is None:
            return None
        try:
            ctx = ConversationContext.model_validate_json(raw)
        except ValidationError:
            logger.warning("session.decode.error session=%s", session_id)
            return None
        await r.expire(self._key(session_id), self._ttl)
        return ctx

    async def touch(self, session_id: str) -> bool:
        if not session_id:
            return False
        r = await self._client()
        return bool(await r.expire(self._key(session_id), self._ttl))

    async def delete(self, session_id: str) -> int:
        if not session_id:
            return 0
        r = await self._client()
        return int(await r.delete(self._key(session_id)))
