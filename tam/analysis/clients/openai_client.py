from typing import Optional

import openai

from tam.analysis.clients.base_client import LLMClient, LLMResponse
from tam.core.models import ProviderId

# Groq and xAI both serve OpenAI-compatible chat completion endpoints
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
XAI_BASE_URL = "https://api.x.ai/v1"


class OpenAIClient(LLMClient):
    """Chat completions client for OpenAI and OpenAI-compatible providers."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1",
        provider: ProviderId = ProviderId.OPENAI,
        base_url: Optional[str] = None,
        **kwargs
    ):
        super().__init__(api_key, model, **kwargs)
        self._provider = provider
        self.base_url = base_url
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)

    @property
    def provider(self) -> ProviderId:
        return self._provider

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """Generate completion using the chat completions API."""
        self._validate_prompt(prompt)

        # Convert to chat format
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self._get_max_tokens(max_tokens),
                temperature=self._get_temperature(temperature)
            )
        except Exception as e:
            self._handle_provider_error(e)

        content = ""
        if response.choices and response.choices[0].message.content:
            content = response.choices[0].message.content

        return LLMResponse(
            content=content,
            model=self.model,
            provider=self.provider
        )
