from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tam.core.models import ProviderId

CREDENTIAL_ENV_KEYS: Dict[ProviderId, str] = {
    ProviderId.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderId.GROQ: "GROQ_API_KEY",
    ProviderId.OPENAI: "OPENAI_API_KEY",
    ProviderId.GROK: "XAI_API_KEY",
}

MODERATION_ENV_KEY = "MODERATION_API_KEY"


class AnalysisSettings(BaseModel):
    """Completion parameters for market analysis and population estimates."""
    temperature: float = 0.3
    max_tokens: int = 1024
    default_population: int = Field(default=8_100_000_000, gt=0)
    default_dot_count: int = Field(default=2500, gt=0)


class ModerationSettings(BaseModel):
    """Safety classifier run on model output before it is trusted."""
    model: str = "llama-guard-3-8b"
    base_url: str = "https://api.groq.com/openai/v1"
    temperature: float = 0.0
    max_tokens: int = 100


class TamConfig(BaseModel):
    """
    Process-wide configuration, read once at startup.

    `credentials` maps provider ids to API keys; a provider is available
    exactly when it has a non-empty key here. Nothing downstream reads the
    environment directly.
    """
    credentials: Dict[ProviderId, str] = {}
    moderation_api_key: Optional[str] = None
    analysis: AnalysisSettings = AnalysisSettings()
    moderation: ModerationSettings = ModerationSettings()

    def has_credential(self, provider_id: ProviderId) -> bool:
        return bool(self.credentials.get(provider_id))

    def credential_flags(self) -> Dict[ProviderId, bool]:
        """{provider id: credential present} for every known provider."""
        return {provider_id: self.has_credential(provider_id) for provider_id in ProviderId}

    @staticmethod
    def _read_credentials(environ: Mapping[str, str]) -> Dict[ProviderId, str]:
        credentials = {}
        for provider_id, env_key in CREDENTIAL_ENV_KEYS.items():
            value = environ.get(env_key, "").strip()
            if value:
                credentials[provider_id] = value
        return credentials

    @staticmethod
    def _read_moderation_key(environ: Mapping[str, str]) -> Optional[str]:
        key = environ.get(MODERATION_ENV_KEY, "").strip() or environ.get("GROQ_API_KEY", "").strip()
        return key or None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> TamConfig:
        """Build config from environment variables, loading `.env` first if present."""
        if environ is None:
            if dotenv_path or os.path.exists(".env"):
                load_dotenv(dotenv_path or ".env")
            environ = os.environ

        return cls(
            credentials=cls._read_credentials(environ),
            moderation_api_key=cls._read_moderation_key(environ),
        )

    @classmethod
    def from_file(cls, path: str, environ: Optional[Mapping[str, str]] = None) -> TamConfig:
        """Load settings from a YAML or JSON file. Credentials still come from the environment."""
        file_path = Path(path)

        with open(file_path, 'r') as f:
            if file_path.suffix.lower() in ['.yml', '.yaml']:
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        base = cls.from_env(environ)
        analysis_data = data.get('analysis', {})
        moderation_data = data.get('moderation', {})

        return cls(
            credentials=base.credentials,
            moderation_api_key=base.moderation_api_key,
            analysis=AnalysisSettings(**analysis_data) if analysis_data else AnalysisSettings(),
            moderation=ModerationSettings(**moderation_data) if moderation_data else ModerationSettings(),
        )

    @classmethod
    def default(cls) -> TamConfig:
        """Defaults with no credentials, so no provider is available."""
        return cls()
