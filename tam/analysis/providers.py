"""Static provider table and credential-gated provider/model resolution."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from tam.analysis.errors import NoProviderConfigured, ProviderUnavailable
from tam.core.models import ProviderId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Provider:
    id: ProviderId
    name: str
    models: Tuple[str, ...]
    env_key: str

    @property
    def default_model(self) -> str:
        return self.models[0]

    def to_dict(self) -> Dict:
        return {"id": self.id.value, "name": self.name, "models": list(self.models)}


PROVIDERS: Tuple[Provider, ...] = (
    Provider(
        id=ProviderId.ANTHROPIC,
        name="Anthropic (Claude)",
        models=(
            "claude-opus-4-20250514",
            "claude-sonnet-4-20250514",
            "claude-haiku-4-20250414",
            "claude-3.5-sonnet-20241022",
        ),
        env_key="ANTHROPIC_API_KEY",
    ),
    Provider(
        id=ProviderId.GROQ,
        name="Groq (Llama / Mixtral)",
        models=("llama-3.3-70b-versatile", "llama-3.1-8b-instant", "mixtral-8x7b-32768"),
        env_key="GROQ_API_KEY",
    ),
    Provider(
        id=ProviderId.OPENAI,
        name="OpenAI (GPT)",
        models=("gpt-4.1", "gpt-4.1-mini", "gpt-4.1-nano", "gpt-4o", "gpt-4o-mini", "o3-mini"),
        env_key="OPENAI_API_KEY",
    ),
    Provider(
        id=ProviderId.GROK,
        name="Grok (xAI)",
        models=("grok-3", "grok-3-mini"),
        env_key="XAI_API_KEY",
    ),
)


class ProviderRegistry:
    """
    Providers filtered by which credentials are present.

    Availability is fixed at construction from a `{provider id: present}`
    mapping, so tests can describe any combination without touching the
    environment.
    """

    def __init__(
        self,
        credential_flags: Mapping[ProviderId, bool],
        providers: Tuple[Provider, ...] = PROVIDERS
    ):
        self.providers = providers
        self._flags = {ProviderId(k): bool(v) for k, v in credential_flags.items()}

    def available(self) -> List[Provider]:
        """Providers with a credential, in table order."""
        return [p for p in self.providers if self._flags.get(p.id, False)]

    def get(self, provider_id: str) -> Optional[Provider]:
        for provider in self.providers:
            if provider.id.value == provider_id:
                return provider
        return None

    def resolve(self, requested_id: Optional[str] = None) -> Provider:
        """Requested provider if available, else the first available one.

        Raises:
            NoProviderConfigured: no provider has a credential.
            ProviderUnavailable: `requested_id` is not among the available providers.
        """
        available = self.available()
        if not available:
            raise NoProviderConfigured()

        if not requested_id:
            return available[0]

        for provider in available:
            if provider.id.value == requested_id:
                return provider
        raise ProviderUnavailable(requested_id)

    def resolve_model(self, provider: Provider, requested_model: Optional[str] = None) -> str:
        """Requested model if the provider lists it, else the provider's default."""
        if requested_model and requested_model in provider.models:
            return requested_model
        if requested_model:
            logger.info(f"Model {requested_model!r} not offered by {provider.id.value}, using {provider.default_model}")
        return provider.default_model
