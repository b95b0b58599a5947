"""Per-request options for `ask()`, `ask_json()` and `stream()`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chorus.errors import ConfigurationError
from chorus.types import THINKING_LEVELS, Message, ThinkingLevel, is_thinking_level

#: Generic sampling/behaviour knobs, in the order they are translated.
GENERATION_FIELDS: tuple[str, ...] = (
    "temperature",
    "top_p",
    "top_k",
    "presence_penalty",
    "frequency_penalty",
    "max_tokens",
    "user",
)

_NUMERIC_FIELDS = ("temperature", "top_p", "presence_penalty", "frequency_penalty")


@dataclass(frozen=True)
class RequestOptions:
    """Optional request features shared by every provider.

    Values are forwarded unclamped; range checking is the provider's job.
    Features a provider or model lacks are dropped silently.
    """

    #: Prior conversation turns; the prompt is appended as the last user turn.
    messages: tuple[Message, ...] | list[Message | dict[str, Any]] | None = None
    #: System directive; appended to any system message already present.
    instructions: str | None = None

    #: Generation tuning parameters
    temperature: float | None = None
    max_tokens: int | None = None
    #: Ignored when temperature is set on providers that treat them as exclusive.
    top_p: float | None = None
    top_k: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None

    #: Overrides the client's default thinking level.
    thinking: ThinkingLevel | None = None
    #: End-user identifier for provider-side abuse tracking.
    user: str | None = None

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if self.messages is not None:
            if not isinstance(self.messages, (list, tuple)):
                raise ConfigurationError(
                    "messages must be a list of role/content messages",
                    hint="Pass messages=[{'role': 'user', 'content': '...'}].",
                )
            object.__setattr__(
                self, "messages", tuple(Message.coerce(m) for m in self.messages)
            )

        if self.instructions is not None and not isinstance(self.instructions, str):
            raise ConfigurationError(
                "instructions must be a string",
                hint="Pass instructions='You are a concise assistant.'",
            )

        for name in _NUMERIC_FIELDS:
            value = getattr(self, name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (int, float))
            ):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")

        for name in ("max_tokens", "top_k"):
            value = getattr(self, name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int)
            ):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        if self.thinking is not None and not is_thinking_level(self.thinking):
            raise ConfigurationError(
                f"Unknown thinking level: {self.thinking!r}",
                hint="Use one of: " + ", ".join(THINKING_LEVELS) + ".",
            )

        if self.user is not None and not isinstance(self.user, str):
            raise ConfigurationError("user must be a string identifier")

    def generation_values(self) -> dict[str, Any]:
        """Return the explicitly set generation knobs, in translation order."""
        return {
            name: getattr(self, name)
            for name in GENERATION_FIELDS
            if getattr(self, name) is not None
        }
