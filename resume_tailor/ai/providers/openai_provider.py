from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

import openai
from openai import AsyncOpenAI

from resume_tailor.ai.errors import (
    OracleError,
    OracleQuotaExceededError,
    OracleRateLimitedError,
    OracleTimeoutError,
    OracleUnavailableError,
)
from resume_tailor.ai.types import ChatMessage

logger = logging.getLogger(__name__)


def translate_sdk_error(exc: Exception) -> OracleError:
    """Map OpenAI SDK failures onto the oracle error taxonomy."""
    if isinstance(exc, openai.APITimeoutError):
        return OracleTimeoutError("The AI service did not answer in time.")
    if isinstance(exc, openai.APIConnectionError):
        return OracleUnavailableError("Could not reach the AI service.")
    if isinstance(exc, openai.APIStatusError):
        code = getattr(exc, "code", None)
        if exc.status_code == 402 or code == "insufficient_quota":
            return OracleQuotaExceededError("AI credits are exhausted. Please add credits to continue.")
        if exc.status_code == 429:
            return OracleRateLimitedError("Rate limit exceeded. Please try again in a moment.")
        return OracleUnavailableError(f"AI service error: {exc.status_code}")
    return OracleUnavailableError(f"AI service error: {type(exc).__name__}")


class OpenAIProvider:
    api_key_env = "OPENAI_API_KEY"
    base_url_env = "OPENAI_BASE_URL"
    default_base_url: Optional[str] = None

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 45.0,
        max_retries: int = 2,
        temperature: float = 0.3,
    ):
        self._model = model
        self._temperature = temperature
        key = (api_key or os.getenv(self.api_key_env) or "").strip()
        if not key:
            raise OracleUnavailableError(f"{self.api_key_env} is missing", code="oracle_not_configured")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv(self.base_url_env) or self.default_base_url),
            timeout=timeout_s,
            max_retries=int(os.getenv("OPENAI_MAX_RETRIES", str(max_retries))),
        )

    async def complete(
        self, messages: Sequence[ChatMessage], *, json_mode: bool = False
    ) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        create_kwargs = {
            "model": self._model,
            "messages": payload,
            "temperature": self._temperature,
        }
        if json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**create_kwargs)
        except openai.OpenAIError as exc:
            logger.warning("oracle_call_failed model=%s error=%s", self._model, type(exc).__name__)
            raise translate_sdk_error(exc) from exc

        content = response.choices[0].message.content if response.choices else ""
        return content or ""
