"""Provider protocol: the one completion primitive each SDK adapter offers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.providers.models import ProviderRequest, ProviderResponse
    from chorus.types import ProviderName


@runtime_checkable
class Provider(Protocol):
    """Minimal provider protocol: complete, stream, aclose.

    Adapters place an already-normalized ``ProviderRequest`` into their SDK
    call and read text back out. SDK failures leave as ``APIError``.
    """

    name: ProviderName

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Perform one non-streaming completion call."""
        ...

    def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        """Yield raw text deltas in arrival order; empty deltas may appear."""
        ...

    async def aclose(self) -> None:
        """Release SDK client resources."""
        ...
