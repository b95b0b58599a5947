"""Shared vocabulary: provider names, roles, thinking levels and messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from chorus.errors import ConfigurationError

ProviderName = Literal["openai", "claude", "gemini", "groq", "mistral"]
Role = Literal["system", "user", "assistant", "tool", "function"]
ThinkingLevel = Literal["off", "low", "medium", "high"]

PROVIDERS: tuple[ProviderName, ...] = ("openai", "claude", "gemini", "groq", "mistral")
ROLES: frozenset[str] = frozenset({"system", "user", "assistant", "tool", "function"})
#: Thinking levels in ascending order of reasoning effort.
THINKING_LEVELS: tuple[ThinkingLevel, ...] = ("off", "low", "medium", "high")


@dataclass(frozen=True)
class Message:
    """One conversation turn."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        """Reject roles and content the normalizer cannot carry."""
        if self.role not in ROLES:
            raise ConfigurationError(
                f"Unknown message role: {self.role!r}",
                hint="Use one of: " + ", ".join(sorted(ROLES)) + ".",
            )
        if not isinstance(self.content, str):
            raise ConfigurationError(
                "Message content must be a string",
                hint="Pass Message(role='user', content='...').",
            )

    @classmethod
    def coerce(cls, item: Message | dict[str, Any]) -> Message:
        """Accept either a Message or a ``{'role', 'content'}`` dict."""
        if isinstance(item, Message):
            return item
        if isinstance(item, dict) and isinstance(item.get("role"), str):
            content = item.get("content")
            return cls(role=item["role"], content="" if content is None else content)
        raise ConfigurationError(
            "messages items must be Message objects or role/content dicts",
            hint="Pass messages=[{'role': 'user', 'content': '...'}].",
        )


def is_thinking_level(value: object) -> bool:
    """Return True when *value* is one of the thinking levels."""
    return isinstance(value, str) and value in THINKING_LEVELS
