from dataclasses import dataclass

from resume_tailor.core.config import settings

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.5-flash",
}


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    timeout_s: float


def load_ai_config() -> AIConfig:
    provider = settings.ai_provider
    return AIConfig(
        provider=provider,
        model=settings.ai_model or _DEFAULT_MODELS.get(provider, "gpt-4o-mini"),
        timeout_s=settings.oracle_timeout_s,
    )
