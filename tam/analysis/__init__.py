"""
Market analysis against LLM providers.
Provider routing, prompting, moderation and response validation.
"""

from .pipeline import AnalysisPipeline
from .providers import PROVIDERS, Provider, ProviderRegistry

__all__ = [
    'AnalysisPipeline',
    'PROVIDERS',
    'Provider',
    'ProviderRegistry'
]
