"""Domain models for the provider transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolCall:
    """A tool call requested by the model."""

    id: str
    name: str
    #: JSON-encoded arguments.
    arguments: str


@dataclass(frozen=True)
class ProviderRequest:
    """A provider-shaped payload, built fresh for one call.

    ``messages`` and ``fields`` are already in the provider's wire shape;
    adapters only place them into the SDK call.
    """

    model: str
    messages: tuple[dict[str, Any], ...]
    #: Side-channel system text for providers that carry it outside messages.
    system: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProviderResponse:
    """A standardized response from a provider completion call."""

    text: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: dict[str, int] = field(default_factory=dict)
