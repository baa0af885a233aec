"""OpenAI-compatible chat client for the provider picked by model_selection."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from openai import BadRequestError, OpenAI

from model_selection import DEFAULT_AGENT_KEY, PROVIDERS, apply_model_selection

logger = logging.getLogger(__name__)


def _part_text(part: Any) -> str | None:
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        value = part.get("text") or part.get("content")
        return value if isinstance(value, str) else None
    text = getattr(part, "text", None)
    return text if isinstance(text, str) else None


def _content_to_text(content: Any) -> str:
    """Flatten message content (plain string or list of parts) into text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = (_part_text(part) for part in content)
        joined = "\n".join(text.strip() for text in texts if text and text.strip())
        if joined:
            return joined
    return _part_text(content) or str(content).strip()


class UnifiedClient:
    def __init__(self, agent_key: str = DEFAULT_AGENT_KEY):
        provider, model_name, base_url, api_key = apply_model_selection(agent_key)
        if not api_key:
            expected = PROVIDERS[provider].api_key_envs[0]
            raise RuntimeError(
                f"API key for provider '{provider}' is not set. Please set '{expected}' in your secrets.env file."
            )

        self.provider = provider
        self.model_name = model_name
        self.base_url = base_url
        # 日本語: Gemini の互換 API はヘッダでもキーを要求する / English: Gemini's compatible API also expects the key as a header
        headers = {"x-goog-api-key": api_key} if provider == "gemini" else None
        self.client = OpenAI(api_key=api_key, base_url=base_url, default_headers=headers)

    def create(self, **kwargs):
        kwargs.setdefault("model", self.model_name)
        try:
            return self.client.chat.completions.create(**kwargs)
        except BadRequestError as exc:
            # 日本語: max_tokens 非対応モデルは max_completion_tokens で再送 / English: Resend with max_completion_tokens when max_tokens is rejected
            if "max_tokens" not in kwargs or "max_tokens" not in str(exc):
                raise
            logger.info("Model %s rejected max_tokens; retrying with max_completion_tokens", self.model_name)
            kwargs["max_completion_tokens"] = kwargs.pop("max_tokens")
            return self.client.chat.completions.create(**kwargs)

    def complete_text(self, messages: List[Dict[str, str]], **kwargs) -> str:
        response = self.create(messages=messages, **kwargs)
        return _content_to_text(response.choices[0].message.content)
