"""Lazy initialisation of the shared tutor service (LLM provider + pipeline config)."""

from socratic_tutor.ai.llm_openai import OpenAIProvider
from socratic_tutor.config import settings
from socratic_tutor.services.tutor_service import TutorConfig, TutorService

_tutor_service: TutorService | None = None


def build_tutor_service(config: TutorConfig) -> TutorService:
    llm = OpenAIProvider(api_key=config.api_key, model_id=config.model, api_url=config.api_url)
    return TutorService(config, llm)


def get_tutor_service() -> TutorService:
    """Return the process-wide tutor service, built from settings on first use."""
    global _tutor_service
    if _tutor_service is None:
        _tutor_service = build_tutor_service(TutorConfig.from_settings(settings))
    return _tutor_service
