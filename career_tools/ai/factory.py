from career_tools.ai.config import AIConfig, load_ai_config
from career_tools.ai.types import ModelClient

from career_tools.ai.providers.openai_provider import OpenAIProvider


def get_model_client(cfg: AIConfig | None = None) -> ModelClient:
    cfg = cfg or load_ai_config()

    if cfg.provider in {"openai", "groq"}:
        return OpenAIProvider(
            model=cfg.model,
            api_key=cfg.api_key if cfg.enabled else None,
            base_url=cfg.base_url,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
