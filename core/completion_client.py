# core/completion_client.py
from typing import Any, Dict, List, Optional, Sequence
import httpx
from config.settings import settings
from model.chat import ChatMessage
from util.errors import CompletionError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated."


def _history_messages(history: Sequence[ChatMessage], limit: int) -> List[Dict[str, str]]:
    """
    Last `limit` user/assistant turns shaped for the Messages API.
    The API wants alternating roles starting with "user", so leading assistant
    turns are dropped and consecutive same-role turns are merged.
    """
    turns = [m for m in history if m.role in ("user", "assistant") and m.content]
    turns = turns[-limit:] if limit > 0 else []
    while turns and turns[0].role == "assistant":
        turns = turns[1:]

    out: List[Dict[str, str]] = []
    for m in turns:
        if out and out[-1]["role"] == m.role:
            out[-1]["content"] += "\n\n" + m.content
        else:
            out.append({"role": m.role, "content": m.content})
    return out


def _join_text(data: Dict[str, Any]) -> str:
    content = data.get("content") or []
    if not isinstance(content, list):
        return ""
    parts = [
        node.get("text") or ""
        for node in content
        if isinstance(node, dict) and node.get("type") == "text"
    ]
    return "".join(parts).strip()


class CompletionClient:
    """
    Thin async client for the hosted completion service.

    One POST per call with a fixed timeout; no retries. Any non-2xx status,
    transport failure or timeout surfaces as CompletionError.
    """

    def __init__(
        self,
        *,
        api_key: str = settings.ANTHROPIC_API_KEY,
        model: str = settings.ANTHROPIC_MODEL,
        api_url: str = settings.ANTHROPIC_API_URL,
        version: str = settings.ANTHROPIC_VERSION,
        timeout: float = settings.COMPLETION_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._version = version
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self._version,
            "content-type": "application/json",
        }

    def _payload(
        self, prompt: str, history: Optional[Sequence[ChatMessage]]
    ) -> Dict[str, Any]:
        messages = _history_messages(history or [], settings.COMPLETION_HISTORY_MESSAGES)
        if messages and messages[-1]["role"] == "user":
            messages.append({"role": "assistant", "content": "(continued)"})
        messages.append({"role": "user", "content": prompt})
        return {
            "model": self._model,
            "max_tokens": settings.COMPLETION_MAX_TOKENS,
            "messages": messages,
            "temperature": settings.COMPLETION_TEMPERATURE,
        }

    async def generate(
        self, prompt: str, history: Optional[Sequence[ChatMessage]] = None
    ) -> str:
        payload = self._payload(prompt, history)
        try:
            with timed(
                logger, "ai.complete", model=self._model, turns=len(payload["messages"])
            ):
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    r = await client.post(
                        self._api_url, headers=self._headers(), json=payload
                    )
                    r.raise_for_status()
                    data = r.json()
        except httpx.HTTPStatusError as e:
            logger.error("ai.complete.status code=%d", e.response.status_code)
            raise CompletionError(f"status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("ai.complete.transport err=%s", type(e).__name__)
            raise CompletionError(type(e).__name__) from e
        except ValueError as e:
            logger.error("ai.complete.decode.error")
            raise CompletionError("invalid response body") from e

        text = _join_text(data if isinstance(data, dict) else {})
        if not text:
            logger.warning("ai.complete.empty model=%s", self._model)
            return NO_RESPONSE
        logger.info("ai.complete.ok chars=%d", len(text))
        return text
