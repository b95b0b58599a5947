"""Anthropic Messages API provider (Claude models)."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from chorus.errors import APIError
from chorus.providers._errors import wrap_provider_error
from chorus.providers.models import ProviderRequest, ProviderResponse, ToolCall

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.types import ProviderName


class AnthropicProvider:
    """Anthropic Messages API provider."""

    name: ProviderName = "claude"

    def __init__(self, api_key: str, *, base_url: str | None = None) -> None:
        """Initialize with an API key and optional endpoint override."""
        self.api_key = api_key
        self.base_url = base_url
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize and return the async Anthropic client."""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError as e:
                raise APIError(
                    "anthropic package not installed",
                    hint="pip install anthropic",
                ) from e
            self._client = AsyncAnthropic(api_key=self.api_key, base_url=self.base_url)
        return self._client

    @staticmethod
    def _create_kwargs(request: ProviderRequest) -> dict[str, Any]:
        create_kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": list(request.messages),
        }
        if request.system:
            create_kwargs["system"] = request.system
        create_kwargs.update(request.fields)
        return create_kwargs

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Create one message."""
        client = self._get_client()
        try:
            response = await client.messages.create(**self._create_kwargs(request))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="complete",
                message="Anthropic completion failed",
            ) from e
        return _parse_response(response)

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Stream a message, yielding the text of each ``text_delta`` event."""
        client = self._get_client()
        try:
            stream = await client.messages.create(
                **self._create_kwargs(request), stream=True
            )
            async for event in stream:
                if getattr(event, "type", None) != "content_block_delta":
                    continue
                delta = getattr(event, "delta", None)
                if getattr(delta, "type", None) == "text_delta":
                    yield getattr(delta, "text", None)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="stream",
                message="Anthropic stream failed",
            ) from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        client = self._client
        if client is None:
            return
        self._client = None
        await client.close()


def _parse_response(response: Any) -> ProviderResponse:
    """Parse an Anthropic Message into ProviderResponse."""
    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []

    for block in getattr(response, "content", None) or []:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            text = getattr(block, "text", "")
            if isinstance(text, str):
                text_parts.append(text)
        elif block_type == "tool_use":
            tool_calls.append(
                ToolCall(
                    id=str(getattr(block, "id", "")),
                    name=str(getattr(block, "name", "")),
                    arguments=json.dumps(getattr(block, "input", {})),
                )
            )

    usage: dict[str, int] = {}
    usage_raw = getattr(response, "usage", None)
    if usage_raw is not None:
        input_tokens = int(getattr(usage_raw, "input_tokens", 0) or 0)
        output_tokens = int(getattr(usage_raw, "output_tokens", 0) or 0)
        usage = {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        }

    return ProviderResponse(
        text="\n\n".join(text_parts) if text_parts else None,
        tool_calls=tool_calls,
        finish_reason=_normalize_stop_reason(getattr(response, "stop_reason", None)),
        usage=usage,
    )


def _normalize_stop_reason(stop_reason: Any) -> str | None:
    """Map Anthropic stop_reason to a normalized lowercase string."""
    if stop_reason is None:
        return None
    reason = str(stop_reason).lower()

    mapping: dict[str, str] = {
        "end_turn": "stop",
        "stop_sequence": "stop",
        "max_tokens": "max_tokens",
        "tool_use": "tool_calls",
    }
    return mapping.get(reason, reason)
