"""Mistral chat provider."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from chorus.errors import APIError
from chorus.providers._errors import wrap_provider_error
from chorus.providers.models import ProviderRequest, ProviderResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.types import ProviderName


class MistralProvider:
    """Mistral chat API provider."""

    name: ProviderName = "mistral"

    def __init__(self, api_key: str, *, base_url: str | None = None) -> None:
        """Initialize with an API key and optional server URL override."""
        self.api_key = api_key
        self.base_url = base_url
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize and return the Mistral client."""
        if self._client is None:
            try:
                from mistralai import Mistral
            except ImportError as e:
                raise APIError(
                    "mistralai package not installed",
                    hint="pip install mistralai",
                ) from e
            self._client = Mistral(api_key=self.api_key, server_url=self.base_url)
        return self._client

    @staticmethod
    def _create_kwargs(request: ProviderRequest) -> dict[str, Any]:
        return {
            "model": request.model,
            "messages": list(request.messages),
            **request.fields,
        }

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Create one chat completion."""
        client = self._get_client()
        try:
            result = await client.chat.complete_async(**self._create_kwargs(request))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="complete",
                message="Mistral completion failed",
            ) from e

        choices = getattr(result, "choices", None) or []
        if not choices:
            return ProviderResponse()
        message = getattr(choices[0], "message", None)
        finish_reason = getattr(choices[0], "finish_reason", None)
        return ProviderResponse(
            text=_content_text(getattr(message, "content", None)),
            finish_reason=str(finish_reason) if finish_reason is not None else None,
        )

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Stream a chat completion, yielding each delta's text."""
        client = self._get_client()
        try:
            events = await client.chat.stream_async(**self._create_kwargs(request))
            async for event in events:
                data = getattr(event, "data", None)
                choices = getattr(data, "choices", None)
                if not choices:
                    continue
                content = getattr(choices[0].delta, "content", None)
                if isinstance(content, list):
                    for chunk in content:
                        yield _chunk_text(chunk)
                else:
                    yield _content_text(content)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="stream",
                message="Mistral stream failed",
            ) from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        client = self._client
        if client is None:
            return
        self._client = None
        aexit = getattr(client, "__aexit__", None)
        if callable(aexit):
            await aexit(None, None, None)


def _chunk_text(chunk: Any) -> str | None:
    if isinstance(chunk, dict):
        text = chunk.get("text")
    else:
        text = getattr(chunk, "text", None)
    return text if isinstance(text, str) else None


def _content_text(content: Any) -> str | None:
    """Mistral content is a string or a list of typed chunks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(_chunk_text(chunk) or "" for chunk in content)
    return None
