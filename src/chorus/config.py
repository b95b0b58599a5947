"""Configuration: frozen ClientConfig with explicit provider/model requirements."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from chorus.capabilities import MODELS, is_known_model
from chorus.errors import ConfigurationError
from chorus.types import (
    PROVIDERS,
    THINKING_LEVELS,
    ProviderName,
    ThinkingLevel,
    is_thinking_level,
)

load_dotenv()

#: Accepted spellings that name a supported provider.
PROVIDER_ALIASES: dict[str, ProviderName] = {
    "anthropic": "claude",
    "google": "gemini",
}

#: Provider API key environment variable names, in lookup order.
API_KEY_ENV_VARS: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "claude": ("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "groq": ("GROQ_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
}


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for one Chorus client.

    Provider and model are required and validated against the known model
    catalogue. API keys are auto-resolved from standard environment variables.

    Example:
        config = ClientConfig(provider="claude", model="claude-sonnet-4-0")
        # API key is resolved from ANTHROPIC_API_KEY (or CLAUDE_API_KEY)
    """

    provider: ProviderName
    model: str
    #: Auto-resolved from the provider's environment variable when *None*.
    api_key: str | None = None
    #: Endpoint override forwarded to the provider SDK.
    base_url: str | None = None
    #: Default system directive for every request.
    instructions: str | None = None
    #: Default thinking level; per-request values take precedence.
    thinking: ThinkingLevel | None = None
    use_mock: bool = False

    def __post_init__(self) -> None:
        """Canonicalize the provider, resolve the API key, validate."""
        provider = PROVIDER_ALIASES.get(self.provider, self.provider)
        if provider not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider: {self.provider!r}",
                hint="Supported providers: " + ", ".join(repr(p) for p in PROVIDERS),
            )
        object.__setattr__(self, "provider", provider)

        if not isinstance(self.model, str) or not is_known_model(provider, self.model):
            raise ConfigurationError(
                f"Unknown {provider} model: {self.model!r}",
                hint="Known models: " + ", ".join(MODELS[provider]),
            )

        if self.thinking is not None and not is_thinking_level(self.thinking):
            raise ConfigurationError(
                f"Unknown thinking level: {self.thinking!r}",
                hint="Use one of: " + ", ".join(THINKING_LEVELS) + ".",
            )

        if self.instructions is not None and not isinstance(self.instructions, str):
            raise ConfigurationError("instructions must be a string")

        # Auto-resolve API key from environment if not provided
        if self.api_key is None and not self.use_mock:
            object.__setattr__(self, "api_key", _api_key_from_env(provider))

        # Validate: real API calls need a key
        if not self.use_mock and not self.api_key:
            env_vars = " or ".join(API_KEY_ENV_VARS[provider])
            raise ConfigurationError(
                f"API key required for {provider}",
                hint=f"Set {env_vars} environment variable or pass api_key=...",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ClientConfig(provider={self.provider!r}, model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"base_url={self.base_url!r}, use_mock={self.use_mock})"
        )

    __repr__ = __str__


def _api_key_from_env(provider: ProviderName) -> str | None:
    for env_var in API_KEY_ENV_VARS[provider]:
        value = os.environ.get(env_var)
        if value:
            return value
    return None
