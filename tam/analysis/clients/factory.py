from typing import Optional

from tam.analysis.clients.anthropic_client import AnthropicClient
from tam.analysis.clients.base_client import LLMClient
from tam.analysis.clients.openai_client import GROQ_BASE_URL, XAI_BASE_URL, OpenAIClient
from tam.core.config import TamConfig
from tam.core.models import ProviderId


class ClientFactory:
    """Create LLM clients from config."""

    def __init__(self, config: TamConfig):
        self.config = config

    def create_client(self, provider_id: ProviderId, model: str) -> LLMClient:
        """Create a client for a provider and model, using the configured key."""
        api_key = self.config.credentials.get(provider_id)
        settings = self.config.analysis
        kwargs = {
            "default_max_tokens": settings.max_tokens,
            "default_temperature": settings.temperature,
        }

        if provider_id == ProviderId.ANTHROPIC:
            return AnthropicClient(api_key=api_key, model=model, **kwargs)
        elif provider_id == ProviderId.OPENAI:
            return OpenAIClient(api_key=api_key, model=model, **kwargs)
        elif provider_id == ProviderId.GROQ:
            return OpenAIClient(api_key=api_key, model=model, provider=ProviderId.GROQ, base_url=GROQ_BASE_URL, **kwargs)
        elif provider_id == ProviderId.GROK:
            return OpenAIClient(api_key=api_key, model=model, provider=ProviderId.GROK, base_url=XAI_BASE_URL, **kwargs)
        else:
            raise ValueError(f"Unsupported provider: {provider_id}")

    def create_moderation_client(self) -> Optional[LLMClient]:
        """Client for the safety classifier, or None when moderation has no key."""
        if not self.config.moderation_api_key:
            return None

        settings = self.config.moderation
        return OpenAIClient(
            api_key=self.config.moderation_api_key,
            model=settings.model,
            provider=ProviderId.GROQ,
            base_url=settings.base_url,
            default_max_tokens=settings.max_tokens,
            default_temperature=settings.temperature,
        )
