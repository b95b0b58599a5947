"""Message normalization: generic conversation -> provider message shape."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from chorus.types import Message

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chorus.capabilities import CapabilityRecord

logger = logging.getLogger(__name__)

#: Joins merged system texts and appended instructions.
SYSTEM_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class NormalizedMessages:
    """Provider-shaped messages plus the side-channel system text, if any.

    ``system`` is only set for providers whose ``system_channel`` is
    ``"field"``; message-channel providers carry it as the leading entry.
    """

    system: str | None
    messages: tuple[dict[str, Any], ...]


def build_conversation(
    history: Sequence[Message] | None, prompt: str
) -> tuple[Message, ...]:
    """Append the caller's input as the final user turn."""
    return (*(history or ()), Message(role="user", content=prompt))


def resolve_system_text(
    conversation: Sequence[Message], instructions: str | None
) -> str | None:
    """Merge every system message, then the instructions, into one directive.

    Instructions are appended after existing system text, never substituted
    for it.
    """
    texts = [m.content for m in conversation if m.role == "system" and m.content]
    if instructions:
        texts.append(instructions)
    if not texts:
        return None
    return SYSTEM_SEPARATOR.join(texts)


def downgrade_role(role: str, capabilities: CapabilityRecord) -> str:
    """Map *role* onto one the provider accepts. Never raises."""
    if role in capabilities.role_support:
        return role
    return capabilities.role_downgrades.get(role, "user")


def normalize_messages(
    conversation: Sequence[Message],
    instructions: str | None,
    capabilities: CapabilityRecord,
) -> NormalizedMessages:
    """Convert a conversation into the provider's message list.

    Args:
        conversation: Turns in conversation order, user input already last.
        instructions: Optional system directive supplied outside the messages.
        capabilities: Record of the target provider/model.

    Returns:
        NormalizedMessages with exactly one effective system directive.
    """
    system_text = resolve_system_text(conversation, instructions)

    entries: list[dict[str, Any]] = []
    for message in conversation:
        if message.role == "system":
            continue
        role = downgrade_role(message.role, capabilities)
        if role != message.role:
            logger.debug(
                "Downgraded role %r to %r for %s",
                message.role,
                role,
                capabilities.provider,
            )
        entries.append(_render(role, message.content, capabilities))

    if capabilities.system_channel == "field":
        return NormalizedMessages(system=system_text, messages=tuple(entries))

    if system_text is not None:
        entries.insert(0, _render("system", system_text, capabilities))
    return NormalizedMessages(system=None, messages=tuple(entries))


def _render(role: str, content: str, capabilities: CapabilityRecord) -> dict[str, Any]:
    wire_role = capabilities.role_aliases.get(role, role)
    if capabilities.content_format == "parts":
        return {"role": wire_role, "parts": [{"text": content}]}
    return {"role": wire_role, "content": content}
