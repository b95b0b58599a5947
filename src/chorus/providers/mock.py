"""Mock provider for running the engine without network access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chorus.providers.models import ProviderRequest, ProviderResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.types import ProviderName


class MockProvider:
    """Echo the last message back; stands in for any provider.

    Requests are still normalized for the provider being mocked, so the
    payload the mock receives is the one the real SDK would see.
    """

    def __init__(self, name: ProviderName) -> None:
        """Mock the provider called *name*."""
        self.name = name
        self.requests: list[ProviderRequest] = []

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Return a deterministic echo of the final message."""
        self.requests.append(request)
        return ProviderResponse(
            text=f"echo: {_last_text(request)[:100]}",
            finish_reason="stop",
            usage={"input_tokens": 10, "output_tokens": 10, "total_tokens": 20},
        )

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Yield the echo word by word."""
        self.requests.append(request)
        words = f"echo: {_last_text(request)[:100]}".split(" ")
        for index, word in enumerate(words):
            yield word if index == len(words) - 1 else f"{word} "

    async def aclose(self) -> None:
        """Nothing to release."""


def _last_text(request: ProviderRequest) -> str:
    if not request.messages:
        return ""
    last = request.messages[-1]
    if "parts" in last:
        return "".join(part.get("text", "") for part in last["parts"])
    content = last.get("content", "")
    return content if isinstance(content, str) else ""
