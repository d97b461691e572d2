import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    api_key: str | None
    base_url: str | None
    timeout_s: float
    enabled: bool


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def _api_key() -> str | None:
    for name in ("AI_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY"):
        value = (os.getenv(name) or "").strip()
        if value and not _looks_like_placeholder(value):
            return value
    return None


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "groq").strip().lower()
    default_base_url = DEFAULT_BASE_URL if provider == "groq" else None
    enabled = (os.getenv("AI_ENABLED") or "1").strip().lower() in {"1", "true", "yes", "y", "on"}
    return AIConfig(
        provider=provider,
        model=os.getenv("AI_MODEL", DEFAULT_MODEL).strip(),
        api_key=_api_key(),
        base_url=(os.getenv("AI_BASE_URL") or "").strip() or default_base_url,
        timeout_s=float(os.getenv("AI_TIMEOUT_S", "20")),
        enabled=enabled,
    )
