"""
Assistant LLM: OpenAI (primary) or Hugging Face (fallback).
When OPENAI_API_KEY is set, uses OpenAI chat completions; otherwise uses HF router.
"""

import logging
from typing import Any

import httpx

from zanichat.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from zanichat.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    return bool(OPENAI_API_KEY or HF_API_KEY)


def _call_openai(messages: list[dict[str, Any]], max_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    from openai import OpenAI

    client = OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)
    response = client.chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    out = (msg.content or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


def _call_hf(messages: list[dict[str, Any]], max_tokens: int) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    if not HF_API_KEY:
        logger.warning("[llm:hf] no HF_API_KEY")
        return ""
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": messages,
        "max_tokens": max_tokens,
    }
    try:
        with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
            response = client.post(HF_CHAT_URL, json=payload, headers=headers)
        if response.status_code != 200:
            logger.warning("[llm:hf] HF LLM error %s: %s", response.status_code, response.text[:200])
            return ""
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[llm:hf] request failed: %s", e)
        return ""
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
        logger.info("[llm:hf] OUT response_len=%d", len(out))
        return out
    return ""


def chat(messages: list[dict[str, Any]], max_tokens: int = 512) -> str:
    """
    Generate a chat completion. Uses OpenAI when OPENAI_API_KEY is set, else Hugging Face.
    If OpenAI fails or returns empty, falls back to HF when HF_API_KEY is set.

    Raises:
        ServiceUnavailableError: If neither provider is configured.
    """
    if not is_configured():
        raise ServiceUnavailableError("Assistant is not configured: set OPENAI_API_KEY or HF_API_KEY in .env")
    logger.info("[llm] IN  messages=%d max_tokens=%d", len(messages), max_tokens)
    if OPENAI_API_KEY:
        try:
            out = _call_openai(messages, max_tokens)
        except Exception as e:
            if not HF_API_KEY:
                raise
            logger.warning("[llm] OpenAI call failed (%s); falling back to Hugging Face", e)
            out = ""
        if out or not HF_API_KEY:
            return out
        logger.info("[llm] OpenAI returned empty; falling back to Hugging Face")
    return _call_hf(messages, max_tokens)
