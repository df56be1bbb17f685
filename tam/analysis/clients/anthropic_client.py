from typing import Optional

import anthropic

from tam.analysis.clients.base_client import LLMClient, LLMResponse
from tam.core.models import ProviderId


class AnthropicClient(LLMClient):
    """Anthropic Claude client implementation."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        **kwargs
    ):
        super().__init__(api_key, model, **kwargs)
        self.client = anthropic.AsyncAnthropic(api_key=api_key)

    @property
    def provider(self) -> ProviderId:
        return ProviderId.ANTHROPIC

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """Generate completion using Anthropic API."""
        self._validate_prompt(prompt)

        request = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._get_max_tokens(max_tokens),
            "temperature": self._get_temperature(temperature),
        }
        if system_prompt:
            request["system"] = system_prompt

        try:
            response = await self.client.messages.create(**request)
        except Exception as e:
            self._handle_provider_error(e)

        # Only a leading text block counts; tool use or empty content yields ""
        text = ""
        if response.content and response.content[0].type == "text":
            text = response.content[0].text

        return LLMResponse(
            content=text,
            model=self.model,
            provider=self.provider
        )
