from typing import List, Optional

import pytest

from tam.analysis.clients.base_client import LLMClient, LLMProviderError, LLMResponse
from tam.analysis.moderation import ModerationGate
from tam.analysis.pipeline import AnalysisPipeline
from tam.analysis.providers import ProviderRegistry
from tam.core.models import ProviderId


class FakeClient(LLMClient):
    """Scripted LLM client that records every call."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None,
                 provider: ProviderId = ProviderId.GROQ, model: str = "fake-model"):
        super().__init__(api_key="test-key", model=model)
        self.reply = reply
        self.error = error
        self._provider = provider
        self.calls: List[dict] = []

    @property
    def provider(self) -> ProviderId:
        return self._provider

    async def complete(self, prompt, system_prompt=None, max_tokens=None, temperature=None):
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model, provider=self.provider)


class FakeBuilder:
    """Stands in for ClientFactory.create_client."""

    def __init__(self, client: FakeClient):
        self.client = client
        self.requests = []

    def __call__(self, provider_id: ProviderId, model: str) -> LLMClient:
        self.requests.append((provider_id, model))
        self.client.model = model
        self.client._provider = provider_id
        return self.client


@pytest.fixture
def make_pipeline():
    """Build a pipeline with fake completion and moderation clients."""

    def _make(reply="", available=(ProviderId.GROQ,), moderation_reply=None,
              completion_error=None, moderation_error=None):
        completion = FakeClient(reply=reply, error=completion_error)
        builder = FakeBuilder(completion)

        moderation_client = None
        if moderation_reply is not None or moderation_error is not None:
            moderation_client = FakeClient(reply=moderation_reply or "", error=moderation_error,
                                           model="llama-guard-3-8b")

        pipeline = AnalysisPipeline(
            registry=ProviderRegistry({p: True for p in available}),
            client_builder=builder,
            moderation=ModerationGate(moderation_client),
        )
        pipeline.fake_completion = completion
        pipeline.fake_builder = builder
        pipeline.fake_moderation = moderation_client
        return pipeline

    return _make


@pytest.fixture
def transport_error():
    return LLMProviderError("groq API error: connection reset")


@pytest.fixture
def make_client():
    """Factory for scripted clients: make_client(reply=..., error=...)."""
    return FakeClient
