"""Request body transformations for chat-completion compatibility."""

import json
from dataclasses import dataclass
from typing import Any

from core.exceptions import InvalidJSON
from core.protocols import RequestLogger

DEFAULT_MODEL = "gemini-1.5-pro-002"
DEFAULT_MAX_TOKENS = 100


@dataclass(frozen=True)
class ChatCompletionRequest:
    """Canonical non-streaming chat request sent upstream."""

    messages: Any
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    stream: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": self.messages,
            "max_tokens": self.max_tokens,
            "stream": self.stream,
        }


def is_json_content_type(content_type: str | None) -> bool:
    """Check whether the media type is application/json or a +json type."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class RequestTransformer:
    """Transform request bodies for upstream compatibility."""

    def __init__(
        self,
        logger: RequestLogger | None = None,
        *,
        enabled: bool = True,
        default_model: str = DEFAULT_MODEL,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._logger = logger
        self.enabled = enabled
        self.default_model = default_model
        self.default_max_tokens = default_max_tokens

    async def transform(self, body: bytes, content_type: str | None) -> bytes:
        """Return the body to forward; the original bytes when not applicable."""
        if not self.enabled or not body or not is_json_content_type(content_type):
            return body

        try:
            payload = self._parse(body)
            chat = self.match_chat_request(payload)
            if chat is not None:
                payload = chat.to_dict()
            return self._serialize(payload)
        except InvalidJSON as e:
            if self._logger:
                self._logger.log_warning("transform", f"Passing body through: {e}")
            return body

    def match_chat_request(self, payload: Any) -> ChatCompletionRequest | None:
        """Recognize a non-streaming chat body; None for every other shape."""
        if not isinstance(payload, dict) or "messages" not in payload:
            return None
        # Streaming requests are forwarded as sent
        if payload.get("stream"):
            return None
        return ChatCompletionRequest(
            messages=payload["messages"],
            model=payload.get("model") or self.default_model,
            max_tokens=payload.get("max_tokens") or self.default_max_tokens,
        )

    @staticmethod
    def _parse(body: bytes) -> Any:
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise InvalidJSON(f"Invalid JSON: {e}") from e

    @staticmethod
    def _serialize(payload: Any) -> bytes:
        # Lone surrogates parse fine but cannot be encoded as UTF-8
        try:
            return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (UnicodeEncodeError, RecursionError) as e:
            raise InvalidJSON(f"Cannot re-encode JSON: {e}") from e
