"""LLM provider/model selection for timetable insights.

Resolution order: the in-process override set through ``POST /model_settings``,
then the ``timetable`` entry of ``model_settings.json``, then built-in
defaults. The environment is only read here, never written.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

DEFAULT_AGENT_KEY = "timetable"
DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL = "gpt-4o-mini"

Selection = Dict[str, Any]


@dataclass(frozen=True)
class ProviderSpec:
    api_key_envs: Tuple[str, ...]
    base_url_env: str
    default_base_url: str | None = None


PROVIDERS: Dict[str, ProviderSpec] = {
    "openai": ProviderSpec(("OPENAI_API_KEY",), "OPENAI_BASE_URL"),
    # Google's OpenAI-compatible endpoint
    "gemini": ProviderSpec(
        ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        "GEMINI_API_BASE",
        "https://generativelanguage.googleapis.com/v1beta/openai",
    ),
    "groq": ProviderSpec(("GROQ_API_KEY",), "GROQ_API_BASE", "https://api.groq.com/openai/v1"),
}

AVAILABLE_MODELS: List[Dict[str, str]] = [
    {"provider": "openai", "model": "gpt-4o-mini", "label": "GPT-4o mini"},
    {"provider": "openai", "model": "gpt-4.1", "label": "GPT-4.1"},
    {"provider": "gemini", "model": "gemini-2.5-flash-lite", "label": "Gemini 2.5 Flash-Lite"},
    {"provider": "groq", "model": "llama-3.3-70b-versatile", "label": "Llama 3.3 70B (Groq)"},
    {"provider": "groq", "model": "llama-3.1-8b-instant", "label": "Llama 3.1 8B (Groq)"},
]

_OVERRIDE_SELECTION: Selection | None = None


def _coerce_selection(raw: Any) -> Selection:
    selection: Selection = {"provider": DEFAULT_PROVIDER, "model": DEFAULT_MODEL, "base_url": None}
    if not isinstance(raw, dict):
        return selection
    for key in selection:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            selection[key] = value.strip()
    if selection["provider"] not in PROVIDERS:
        selection["provider"] = DEFAULT_PROVIDER
    return selection


def _settings_path() -> Path:
    configured = os.getenv("MODEL_SETTINGS_PATH")
    return Path(configured) if configured else Path(__file__).resolve().parent / "model_settings.json"


def _load_selection(agent_key: str) -> Selection:
    """Read the per-agent entry; a missing or unreadable file means defaults."""
    try:
        data = json.loads(_settings_path().read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return _coerce_selection(None)

    agents = data.get("selection", data) if isinstance(data, dict) else None
    return _coerce_selection(agents.get(agent_key) if isinstance(agents, dict) else None)


def _first_env(names: Tuple[str, ...]) -> str:
    return next((os.environ[name] for name in names if os.getenv(name)), "")


def _resolve_base_url(provider: ProviderSpec, explicit: str | None) -> str | None:
    candidate = explicit or os.getenv(provider.base_url_env) or provider.default_base_url
    return candidate.rstrip("/") if candidate else None


def apply_model_selection(
    agent_key: str = DEFAULT_AGENT_KEY, override: Selection | None = None
) -> Tuple[str, str, str | None, str]:
    """Return ``(provider, model, base_url, api_key)`` for the agent."""
    selection = _coerce_selection(override or _OVERRIDE_SELECTION or _load_selection(agent_key))
    provider = PROVIDERS[selection["provider"]]
    return (
        selection["provider"],
        selection["model"],
        _resolve_base_url(provider, selection["base_url"]),
        _first_env(provider.api_key_envs),
    )


def update_override(selection: Selection | None) -> Tuple[str, str, str | None, str]:
    global _OVERRIDE_SELECTION
    _OVERRIDE_SELECTION = _coerce_selection(selection) if selection else None
    return apply_model_selection(override=_OVERRIDE_SELECTION)


def current_available_models() -> List[Dict[str, str]]:
    return [dict(item) for item in AVAILABLE_MODELS]
