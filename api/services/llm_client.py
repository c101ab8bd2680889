"""Async OpenAI client wrapper for report generation and query embeddings."""

from __future__ import annotations

import importlib.util
import os
from typing import Dict, List, Optional, Sequence

_openai_spec = importlib.util.find_spec("openai")
if _openai_spec:  # pragma: no cover - optional dependency
    from openai import AsyncOpenAI
else:  # pragma: no cover - optional dependency
    AsyncOpenAI = None  # type: ignore


class LLMUnavailableError(RuntimeError):
    """Raised when the OpenAI client cannot be initialized or a call fails."""


def _client() -> AsyncOpenAI:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise LLMUnavailableError("OPENAI_API_KEY is not configured")
    if AsyncOpenAI is None:
        raise LLMUnavailableError("openai package is not installed")

    org_id = os.getenv("OPENAI_ORG_ID")
    timeout = float(os.getenv("OPENAI_TIMEOUT", "600"))

    if org_id:
        return AsyncOpenAI(api_key=api_key, organization=org_id, timeout=timeout)
    return AsyncOpenAI(api_key=api_key, timeout=timeout)


def _as_unavailable(exc: Exception) -> LLMUnavailableError:
    error_msg = str(exc)
    lowered = error_msg.lower()
    if "rate_limit" in lowered:
        return LLMUnavailableError(f"OpenAI rate limit exceeded: {error_msg}")
    if "invalid_api_key" in lowered or "authentication" in lowered:
        return LLMUnavailableError(f"Invalid OpenAI API key: {error_msg}")
    if "timeout" in lowered or "timed out" in lowered or type(exc).__name__ == "TimeoutError":
        timeout_val = os.getenv("OPENAI_TIMEOUT", "600")
        return LLMUnavailableError(
            f"OpenAI API error: Request timed out. Current timeout: {timeout_val}s. "
            f"Consider increasing OPENAI_TIMEOUT environment variable."
        )
    if "insufficient_quota" in lowered:
        return LLMUnavailableError(f"OpenAI quota exceeded: {error_msg}")
    return LLMUnavailableError(f"OpenAI API error: {error_msg}")


async def chat_completion(messages: Sequence[Dict[str, str]], model: Optional[str] = None) -> str:
    """Return the trimmed text of the first completion choice."""

    client = _client()
    model_name = model or os.getenv("OPENAI_MODEL", "gpt-5")
    try:
        result = await client.chat.completions.create(model=model_name, messages=list(messages))
    except Exception as exc:  # pragma: no cover - network interaction
        raise _as_unavailable(exc) from exc

    content = result.choices[0].message.content if result.choices else ""
    return (content or "").strip()


async def embed_text(text: str, model: Optional[str] = None) -> List[float]:
    """Embedding vector for ``text`` from the OpenAI embeddings API."""

    client = _client()
    model_name = model or os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    try:
        result = await client.embeddings.create(model=model_name, input=text)
    except Exception as exc:  # pragma: no cover - network interaction
        raise _as_unavailable(exc) from exc
    return list(result.data[0].embedding)
