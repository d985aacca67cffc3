from functools import lru_cache

from resume_tailor.ai.config import load_ai_config
from resume_tailor.ai.types import OracleClient

from resume_tailor.ai.providers.openai_provider import OpenAIProvider
from resume_tailor.ai.providers.gemini_provider import GeminiProvider


@lru_cache(maxsize=1)
def get_oracle_client() -> OracleClient:
    cfg = load_ai_config()

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model, timeout_s=cfg.timeout_s)

    if cfg.provider == "gemini":
        return GeminiProvider(model=cfg.model, timeout_s=cfg.timeout_s)

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
