from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tam.core.models import ProviderId


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    content: str
    model: str
    provider: ProviderId


class LLMClientError(Exception):
    """Base exception for LLM client errors."""
    pass


class LLMProviderError(LLMClientError):
    """Provider-specific errors (API failures, rate limits, etc.)."""
    pass


class LLMValidationError(LLMClientError):
    """Input validation errors."""
    pass


class LLMClient(ABC):
    """Abstract base class for all LLM provider clients."""

    def __init__(
        self,
        api_key: str,
        model: str,
        default_max_tokens: int = 1024,
        default_temperature: float = 0.3
    ):
        if not api_key:
            raise LLMValidationError("API key is required")
        self.api_key = api_key
        self.model = model
        self.default_max_tokens = default_max_tokens
        self.default_temperature = default_temperature

    @property
    @abstractmethod
    def provider(self) -> ProviderId:
        """Return the provider id."""
        pass

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """Generate a completion for a single prompt.

        Implementations return an empty string when the provider sends no
        text back, and raise LLMProviderError on transport or API failure.
        """
        pass

    def get_model_info(self) -> Dict[str, Any]:
        """Return model information."""
        return {
            "provider": self.provider.value,
            "model": self.model
        }

    def _get_max_tokens(self, max_tokens: Optional[int]) -> int:
        """Get max tokens, using default if not specified."""
        return max_tokens if max_tokens is not None else self.default_max_tokens

    def _get_temperature(self, temperature: Optional[float]) -> float:
        """Get temperature, using default if not specified."""
        return temperature if temperature is not None else self.default_temperature

    def _validate_prompt(self, prompt: str) -> None:
        if not isinstance(prompt, str) or not prompt.strip():
            raise LLMValidationError("Prompt cannot be empty")

    def _handle_provider_error(self, error: Exception) -> None:
        """Handle provider-specific errors consistently."""
        raise LLMProviderError(f"{self.provider.value} API error: {str(error)}") from error
