"""Groq provider (OpenAI-compatible chat completions)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chorus.errors import APIError
from chorus.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    from chorus.types import ProviderName


class GroqProvider(OpenAIProvider):
    """Groq chat completions via the ``groq`` SDK."""

    name: ProviderName = "groq"
    display_name = "Groq"

    def _make_client(self) -> Any:
        try:
            from groq import AsyncGroq
        except ImportError as e:
            raise APIError(
                "groq package not installed",
                hint="pip install groq",
            ) from e
        return AsyncGroq(api_key=self.api_key, base_url=self.base_url)
