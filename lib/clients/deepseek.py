"""Async client for the DeepSeek chat completion API.

DeepSeek exposes an OpenAI compatible ``/chat/completions`` endpoint.  Only
the non-streaming call is implemented; it is all the GraphQL resolvers need.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from lib.telemetry.logger import get_logger


logger = get_logger(__name__)


class DeepSeekError(RuntimeError):
    """Raised when a chat completion cannot be produced."""


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None


@dataclass
class DeepSeekClient:
    api_key: Optional[str] = None
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"
    timeout: float = 60.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatCompletion:
        """Send ``messages`` and return the first choice of the completion."""

        if not self.configured:
            raise DeepSeekError("DEEPSEEK_API_KEY is not configured")

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
        }
        if temperature is not None:
            payload["temperature"] = temperature

        url = f"{self.base_url}/chat/completions"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.warning("DeepSeek request failed: %s", e)
            raise DeepSeekError(f"DeepSeek request failed: {e}") from e

        if resp.status_code >= 400:
            logger.warning("DeepSeek returned HTTP %s", resp.status_code)
            raise DeepSeekError(
                f"DeepSeek API error {resp.status_code}: {_error_text(resp)}"
            )
        return _parse_completion(resp, payload["model"])


def _error_text(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", ""))
    return str(body)[:200]


def _parse_completion(resp: httpx.Response, requested_model: str) -> ChatCompletion:
    try:
        body = resp.json()
        choice = body["choices"][0]
        content = choice["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        raise DeepSeekError("DeepSeek returned an unexpected response") from None
    if content is None:
        raise DeepSeekError("DeepSeek returned an empty completion")

    usage = body.get("usage")
    return ChatCompletion(
        content=content,
        model=body.get("model") or requested_model,
        finish_reason=choice.get("finish_reason"),
        usage=Usage(**usage) if isinstance(usage, dict) else None,
    )
