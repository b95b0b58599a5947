"""OpenAI Chat Completions provider."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from chorus.errors import APIError
from chorus.providers._errors import wrap_provider_error
from chorus.providers.models import ProviderRequest, ProviderResponse, ToolCall

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.types import ProviderName


class OpenAIProvider:
    """OpenAI Chat Completions API provider.

    Also the base for other providers whose SDK mirrors the
    ``chat.completions`` surface.
    """

    name: ProviderName = "openai"
    display_name = "OpenAI"

    def __init__(self, api_key: str, *, base_url: str | None = None) -> None:
        """Initialize with an API key and optional endpoint override."""
        self.api_key = api_key
        self.base_url = base_url
        self._client: Any = None

    def _make_client(self) -> Any:
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise APIError(
                "openai package not installed",
                hint="pip install openai",
            ) from e
        return AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

    def _get_client(self) -> Any:
        """Lazily initialize and return the SDK client."""
        if self._client is None:
            self._client = self._make_client()
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
            completion = await client.chat.completions.create(
                **self._create_kwargs(request)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="complete",
                message=f"{self.display_name} completion failed",
            ) from e
        return _parse_completion(completion)

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Stream a chat completion, yielding ``delta.content`` per chunk."""
        client = self._get_client()
        try:
            stream = await client.chat.completions.create(
                **self._create_kwargs(request), stream=True
            )
            async for chunk in stream:
                choices = getattr(chunk, "choices", None)
                if not choices:
                    continue
                delta = getattr(choices[0], "delta", None)
                yield getattr(delta, "content", None)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="stream",
                message=f"{self.display_name} stream failed",
            ) from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        client = self._client
        if client is None:
            return
        self._client = None
        await client.close()


def _parse_completion(completion: Any) -> ProviderResponse:
    """Read the first choice of a chat completion."""
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ProviderResponse()

    choice = choices[0]
    message = getattr(choice, "message", None)
    content = getattr(message, "content", None)

    tool_calls: list[ToolCall] = []
    for call in getattr(message, "tool_calls", None) or []:
        function = getattr(call, "function", None)
        if function is None:
            continue
        tool_calls.append(
            ToolCall(
                id=str(getattr(call, "id", "")),
                name=str(getattr(function, "name", "")),
                arguments=getattr(function, "arguments", None) or "{}",
            )
        )

    usage: dict[str, int] = {}
    usage_raw = getattr(completion, "usage", None)
    if usage_raw is not None:
        usage = {
            "input_tokens": int(getattr(usage_raw, "prompt_tokens", 0) or 0),
            "output_tokens": int(getattr(usage_raw, "completion_tokens", 0) or 0),
            "total_tokens": int(getattr(usage_raw, "total_tokens", 0) or 0),
        }

    finish_reason = getattr(choice, "finish_reason", None)
    return ProviderResponse(
        text=content if isinstance(content, str) else None,
        tool_calls=tool_calls,
        finish_reason=finish_reason if isinstance(finish_reason, str) else None,
        usage=usage,
    )
