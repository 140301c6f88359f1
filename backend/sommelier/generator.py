"""Text generation collaborator used by the advisor for sommelier prose."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from .circuit_breaker import CircuitBreaker, CircuitOpenError
from .settings import settings

logger = logging.getLogger(__name__)

_NEW_STYLE_MODEL_PREFIXES = (
    "gpt-4o",
    "gpt-4.1",
    "gpt-5",
    "o1",
    "o3",
    "o4",
)


class GeneratorUnavailable(RuntimeError):
    """Raised when prose cannot be produced (not configured, HTTP, quota or auth failure)."""


class TextGenerator(Protocol):
    async def generate(
        self, system_prompt: str, user_prompt: str, max_output_tokens: int
    ) -> str: ...


def _token_param(model: str | None) -> str:
    name = (model or "").lower()
    for prefix in _NEW_STYLE_MODEL_PREFIXES:
        if name.startswith(prefix):
            return "max_completion_tokens"
    return "max_tokens"


async def post_json(
    path: str, payload: dict[str, Any], *, timeout: float | None = None
) -> dict[str, Any]:
    if not settings.generation_enabled:
        raise GeneratorUnavailable("OPENAI_API_KEY not configured")
    headers = {
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
        "Content-Type": "application/json",
    }
    client_timeout = httpx.Timeout(
        timeout if timeout is not None else settings.OPENAI_TIMEOUT_SECONDS,
        connect=settings.OPENAI_CONNECT_TIMEOUT_SECONDS,
    )
    base_url = settings.OPENAI_API_BASE.rstrip("/") or "https://api.openai.com/v1"
    # One client per call: the advisor may run each request on a fresh event loop.
    async with httpx.AsyncClient(base_url=base_url, timeout=client_timeout) as client:
        try:
            response = await client.post(path, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise GeneratorUnavailable(f"Request failed: {exc}") from exc
    if response.status_code >= 400:
        raise GeneratorUnavailable(
            f"OpenAI error {response.status_code}: {response.text[:200]}"
        )
    try:
        return response.json()
    except ValueError as exc:
        raise GeneratorUnavailable("Invalid JSON from OpenAI") from exc


class OpenAIChatGenerator:
    """Chat-completions backed generator guarded by a circuit breaker."""

    def __init__(
        self,
        *,
        model: str | None = None,
        temperature: float | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.model = model or settings.SOMMELIER_GPT_MODEL
        self.temperature = (
            temperature if temperature is not None else settings.SOMMELIER_TEMPERATURE
        )
        self.breaker = breaker or CircuitBreaker(
            "openai_chat",
            failure_threshold=settings.SOMMELIER_BREAKER_FAILURES,
            cooldown_seconds=settings.SOMMELIER_BREAKER_COOLDOWN_SECONDS,
        )

    @property
    def available(self) -> bool:
        return settings.generation_enabled and not self.breaker.is_open()

    async def _complete(self, payload: dict[str, Any]) -> str:
        response = await post_json("/chat/completions", payload)
        choices = response.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content or not str(content).strip():
            raise GeneratorUnavailable("Empty completion")
        return str(content).strip()

    async def generate(self, system_prompt: str, user_prompt: str, max_output_tokens: int) -> str:
        if not settings.generation_enabled:
            raise GeneratorUnavailable("OPENAI_API_KEY not configured")
        payload: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        payload[_token_param(self.model)] = max_output_tokens
        try:
            return await self.breaker.call_async(self._complete, payload)
        except CircuitOpenError as exc:
            raise GeneratorUnavailable(str(exc)) from exc


__all__ = ["GeneratorUnavailable", "OpenAIChatGenerator", "TextGenerator", "post_json"]
