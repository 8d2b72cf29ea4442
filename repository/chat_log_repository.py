# repository/chat_log_repository.py
import asyncio
import json
import os
import re
import tempfile
import weakref
from pathlib import Path
from typing import List, Sequence
from pydantic import ValidationError
from config.settings import settings
from model.chat import ChatLog, ChatMessage
import logging

logger = logging.getLogger(__name__)

_SAFE_ID_RX = re.compile(r"[^A-Za-z0-9_-]")


class ChatLogRepository:
    """
    Durable per-conversation message log, one JSON file per conversation id.

    Flow:
    - load/save/append/clear for the same file are serialised by an in-process
      asyncio.Lock keyed by the sanitised id; disk IO runs in a worker thread.
      Locks live only while some caller holds or awaits them.
    - save rewrites the whole file through a temp file + os.replace, so a
      reader never sees a half-written log.
    - Missing or unreadable files load as an empty list.
    """

    def __init__(self, base_dir: str = settings.CHAT_LOG_DIR) -> None:
        self._dir = Path(base_dir)
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    @staticmethod
    def _safe_id(conversation_id: str) -> str:
        safe = _SAFE_ID_RX.sub("_", conversation_id or "")
        if not safe:
            raise ValueError("conversation id is required")
        return safe

    def _lock(self, conversation_id: str) -> asyncio.Lock:
        key = self._safe_id(conversation_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def _path(self, conversation_id: str) -> Path:
        return self._dir / f"{self._safe_id(conversation_id)}.json"

    # ---------------- Disk (sync, called via to_thread) ----------------

    def _read(self, conversation_id: str) -> List[ChatMessage]:
        path = self._path(conversation_id)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "null")
            if raw is None:
                return []
            # legacy logs are a bare message array
            if isinstance(raw, list):
                return [ChatMessage.model_validate(m) for m in raw]
            return ChatLog.model_validate(raw).messages
        except (OSError, ValueError, ValidationError):
            logger.warning("chatlog.read.error conv=%s", conversation_id, exc_info=True)
            return []

    def _write(self, conversation_id: str, messages: Sequence[ChatMessage]) -> None:
        path = self._path(conversation_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = ChatLog(conversation_id=conversation_id, messages=list(messages))
        payload = doc.model_dump_json(by_alias=True, indent=2)

        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".chatlog-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def _remove(self, conversation_id: str) -> None:
        path = self._path(conversation_id)
        if path.exists():
            path.unlink()

    # ---------------- Public API ----------------

    async def load(self, conversation_id: str) -> List[ChatMessage]:
        async with self._lock(conversation_id):
            return await asyncio.to_thread(self._read, conversation_id)

    async def save(self, conversation_id: str, messages: Sequence[ChatMessage]) -> None:
        async with self._lock(conversation_id):
            await asyncio.to_thread(self._write, conversation_id, messages)
        logger.info("chatlog.save conv=%s count=%d", conversation_id, len(messages))

    async def append(
        self, conversation_id: str, messages: Sequence[ChatMessage]
    ) -> List[ChatMessage]:
        """Load, extend and rewrite under one lock hold; returns the full log."""
        async with self._lock(conversation_id):
            current = await asyncio.to_thread(self._read, conversation_id)
            current.extend(messages)
            await asyncio.to_thread(self._write, conversation_id, current)
        logger.info(
            "chatlog.append conv=%s added=%d total=%d",
            conversation_id,
            len(messages),
            len(current),
        )
        return current

    async def clear(self, conversation_id: str) -> None:
        async with self._lock(conversation_id):
            await asyncio.to_thread(self._remove, conversation_id)
        logger.info("chatlog.clear conv=%s", conversation_id)
