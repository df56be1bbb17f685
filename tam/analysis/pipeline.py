"""
Market analysis requests, from query to validated segments.

Two operations share provider resolution:

- `analyze_market`: TAM prompt -> completion -> moderation -> JSON
  extraction -> segment validation.
- `estimate_population`: the query goes to the model as-is and the raw text
  comes back. This path is NOT moderated; it exists for short numeric
  questions such as "how many nurses are in California".
"""

import logging
import time
from numbers import Number
from typing import Callable, Optional

from tam.analysis.clients.base_client import LLMClient, LLMClientError
from tam.analysis.clients.factory import ClientFactory
from tam.analysis.errors import AnalysisFailed, ContentFlagged, InvalidInput
from tam.analysis.extraction import extract_json_object, parse_population_estimate, parse_segment_payload
from tam.analysis.moderation import ModerationGate
from tam.analysis.prompts import SYSTEM_PROMPT, build_estimate_prompt, build_user_prompt
from tam.analysis.providers import Provider, ProviderRegistry
from tam.core.config import AnalysisSettings, TamConfig
from tam.core.models import AnalysisResult, PopulationEstimate, ProviderId

logger = logging.getLogger(__name__)

ClientBuilder = Callable[[ProviderId, str], LLMClient]


class AnalysisPipeline:
    """Runs analysis requests against whichever provider is configured.

    Holds no per-request state; one instance serves concurrent requests.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        client_builder: ClientBuilder,
        moderation: ModerationGate,
        settings: Optional[AnalysisSettings] = None
    ):
        self.registry = registry
        self.client_builder = client_builder
        self.moderation = moderation
        self.settings = settings or AnalysisSettings()

    @classmethod
    def from_config(cls, config: TamConfig) -> "AnalysisPipeline":
        factory = ClientFactory(config)
        return cls(
            registry=ProviderRegistry(config.credential_flags()),
            client_builder=factory.create_client,
            moderation=ModerationGate(
                factory.create_moderation_client(),
                temperature=config.moderation.temperature,
                max_tokens=config.moderation.max_tokens,
            ),
            settings=config.analysis,
        )

    async def analyze_market(
        self,
        query: str,
        population: Optional[Number] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> AnalysisResult:
        """Break a population into segments showing the TAM for `query`.

        Raises:
            InvalidInput, NoProviderConfigured, ProviderUnavailable: before any
                outbound call.
            AnalysisFailed: the completion call failed.
            ContentFlagged: moderation flagged the model output.
            UnparsableResponse: no JSON object in the output.
            MalformedSegmentData: the object is not a valid segment breakdown.
        """
        self._validate_query(query)
        resolved, resolved_model = self._resolve(provider, model)

        base = self._population_base(population)
        user_prompt = build_user_prompt(query.strip(), base)

        content = await self._complete(resolved, resolved_model, user_prompt, SYSTEM_PROMPT)

        moderation = await self.moderation.moderate(content)
        if moderation.flagged:
            raise ContentFlagged(moderation.categories)

        data = extract_json_object(content)
        result = parse_segment_payload(data, resolved.id, resolved_model)

        logger.info(f"Analysis returned {len(result.segments)} segments totalling {result.total_population:,}")
        return result

    async def estimate_population(
        self,
        query: str,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> str:
        """Send `query` to the model with no system prompt and return its raw text.

        The output is not moderated or parsed.
        """
        self._validate_query(query)
        resolved, resolved_model = self._resolve(provider, model)
        return await self._complete(resolved, resolved_model, query, None)

    async def resolve_population(
        self,
        description: str,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> PopulationEstimate:
        """Ask the model how many of `description` exist, e.g. "Nurses in California"."""
        self._validate_query(description)
        text = await self.estimate_population(build_estimate_prompt(description), provider, model)
        estimate = parse_population_estimate(text)
        logger.info(f"Resolved {description!r} to {estimate.label}: {estimate.value:,}")
        return estimate

    def _validate_query(self, query) -> None:
        if not isinstance(query, str) or not query.strip():
            raise InvalidInput()

    def _resolve(self, provider: Optional[str], model: Optional[str]) -> tuple[Provider, str]:
        resolved = self.registry.resolve(provider)
        resolved_model = self.registry.resolve_model(resolved, model)
        logger.info(f"Using provider {resolved.id.value} with model {resolved_model}")
        return resolved, resolved_model

    def _population_base(self, population: Optional[Number]) -> int:
        if isinstance(population, Number) and not isinstance(population, bool) and population > 0:
            return int(round(population))
        return self.settings.default_population

    async def _complete(
        self,
        provider: Provider,
        model: str,
        prompt: str,
        system_prompt: Optional[str]
    ) -> str:
        t0 = time.perf_counter()
        try:
            client = self.client_builder(provider.id, model)
            response = await client.complete(
                prompt=prompt,
                system_prompt=system_prompt,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature
            )
        except LLMClientError as e:
            logger.error(f"Completion failed on {provider.id.value}/{model}: {e}")
            raise AnalysisFailed() from e

        elapsed_ms = round((time.perf_counter() - t0) * 1000.0, 2)
        logger.debug(f"{provider.id.value}/{model} responded in {elapsed_ms}ms")
        logger.debug(f"Raw model output: {response.content}")
        return response.content
