from resume_analyzer.core.config import Settings
from resume_analyzer.ai.types import CompletionClient

from resume_analyzer.ai.providers.gemini_provider import GeminiProvider
from resume_analyzer.ai.providers.openai_provider import OpenAIProvider


def get_completion_client(config: Settings) -> CompletionClient:
    if config.ai_provider == "gemini":
        if not config.gemini_api_key and not config.google_application_credentials:
            raise RuntimeError("You must set either GEMINI_API_KEY or GOOGLE_APPLICATION_CREDENTIALS.")
        return GeminiProvider(model=config.ai_model, api_key=config.gemini_api_key)

    if config.ai_provider == "openai":
        return OpenAIProvider(
            model=config.ai_model,
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout_s=config.completion_timeout_s,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{config.ai_provider}'")
