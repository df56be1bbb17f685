"""
Safety check on model output before it reaches the caller.

The classifier (Llama Guard) answers "safe", or "unsafe" followed by one
category code per line. The gate fails open: with no moderation key it
passes everything, and if the classifier call itself fails the text is
treated as safe.
"""

import logging
from typing import Optional

from tam.analysis.clients.base_client import LLMClient
from tam.core.models import ModerationResult

logger = logging.getLogger(__name__)


def parse_moderation_output(output: str) -> ModerationResult:
    """Interpret classifier text. Anything not starting with 'unsafe' is safe."""
    result = (output or "").strip() or "safe"

    if result.lower().startswith("unsafe"):
        lines = result.split("\n")
        categories = [line.strip() for line in lines[1:] if line.strip()]
        return ModerationResult(flagged=True, categories=categories)

    return ModerationResult(flagged=False, categories=[])


class ModerationGate:

    def __init__(
        self,
        client: Optional[LLMClient],
        temperature: float = 0.0,
        max_tokens: int = 100
    ):
        """
        Args:
            client: Client bound to the safety classifier model, or None to
                disable moderation.
            temperature: Sampling temperature for the classifier.
            max_tokens: Output budget for the classifier.
        """
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens

        if self.enabled:
            logger.info(f"Content moderation enabled ({client.model})")
        else:
            logger.warning("Content moderation disabled: no moderation API key configured")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def moderate(self, text: str) -> ModerationResult:
        """Classify `text`. Never raises."""
        if not self.enabled:
            return ModerationResult(flagged=False, categories=[])

        if not text or not text.strip():
            return ModerationResult(flagged=False, categories=[])

        try:
            response = await self.client.complete(
                prompt=text,
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except Exception as e:
            logger.error(f"Moderation check failed, allowing content: {e}")
            return ModerationResult(flagged=False, categories=[])

        result = parse_moderation_output(response.content)
        if result.flagged:
            logger.warning(f"Content flagged by moderation: {result.categories}")
        return result
