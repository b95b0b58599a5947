"""Gemini provider implementation."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from chorus.errors import APIError
from chorus.providers._errors import wrap_provider_error
from chorus.providers.models import ProviderRequest, ProviderResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.types import ProviderName


class GeminiProvider:
    """Google Gemini API provider."""

    name: ProviderName = "gemini"

    def __init__(self, api_key: str, *, base_url: str | None = None) -> None:
        """Create provider with an API key and optional endpoint override."""
        self.api_key = api_key
        self.base_url = base_url
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            try:
                from google import genai
                from google.genai import types
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                ) from e

            http_options = (
                types.HttpOptions(base_url=self.base_url) if self.base_url else None
            )
            self._client = genai.Client(api_key=self.api_key, http_options=http_options)
        return self._client

    @staticmethod
    def _generate_kwargs(request: ProviderRequest) -> dict[str, Any]:
        from google.genai import types

        config_kwargs: dict[str, Any] = {}
        if request.system:
            config_kwargs["system_instruction"] = request.system
        config_kwargs.update(request.fields)
        return {
            "model": request.model,
            "contents": list(request.messages),
            "config": types.GenerateContentConfig(**config_kwargs),
        }

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Generate content from the Gemini model."""
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                **self._generate_kwargs(request)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="complete",
                message="Gemini generate failed",
            ) from e
        return _parse_response(response)

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Stream content, yielding each chunk's text."""
        client = self._get_client()
        try:
            chunks = await client.aio.models.generate_content_stream(
                **self._generate_kwargs(request)
            )
            async for chunk in chunks:
                yield _response_text(chunk)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="stream",
                message="Gemini stream failed",
            ) from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        client = self._client
        if client is None:
            return
        self._client = None
        aclose = getattr(getattr(client, "aio", None), "aclose", None)
        if callable(aclose):
            await aclose()


def _response_text(response: Any) -> str | None:
    """Read ``response.text`` without tripping over candidate-less responses."""
    try:
        text = getattr(response, "text", None)
    except (AttributeError, ValueError, IndexError):
        return None
    return text if isinstance(text, str) else None


def _parse_response(response: Any) -> ProviderResponse:
    """Parse a Gemini response into ProviderResponse."""
    usage: dict[str, int] = {}
    um = getattr(response, "usage_metadata", None)
    if um is not None:
        usage = {
            "input_tokens": int(getattr(um, "prompt_token_count", 0) or 0),
            "output_tokens": int(getattr(um, "candidates_token_count", 0) or 0),
            "total_tokens": int(getattr(um, "total_token_count", 0) or 0),
        }

    finish_reason: str | None = None
    candidates = getattr(response, "candidates", None) or []
    if candidates:
        reason = getattr(candidates[0], "finish_reason", None)
        name = getattr(reason, "name", reason)
        if isinstance(name, str):
            finish_reason = name.lower()

    return ProviderResponse(
        text=_response_text(response),
        finish_reason=finish_reason,
        usage=usage,
    )
