"""Parameter translation: generic knobs -> provider request fields.

Silent degradation is expressed as data. ``DEGRADATION_RULES`` lists every
capability-driven field-dropping rule in precedence order; after the rules
run, any knob the provider's wire format has no field for is dropped too.
Nothing here raises for an unsupported feature.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chorus.capabilities import CapabilityRecord
    from chorus.options import RequestOptions
    from chorus.types import ThinkingLevel

logger = logging.getLogger(__name__)

_SAMPLING_FIELDS = frozenset(
    {"temperature", "top_p", "presence_penalty", "frequency_penalty"}
)


@dataclass(frozen=True)
class DegradationRule:
    """Drop ``drops`` whenever ``applies(capabilities, values)`` holds."""

    name: str
    applies: Callable[[CapabilityRecord, Mapping[str, Any]], bool]
    drops: frozenset[str]


DEGRADATION_RULES: tuple[DegradationRule, ...] = (
    # Locked models accept only their implicit default sampling.
    DegradationRule(
        name="temperature_locked",
        applies=lambda caps, values: caps.temperature_locked,
        drops=_SAMPLING_FIELDS,
    ),
    # Temperature wins over nucleus sampling.
    DegradationRule(
        name="top_p_exclusive_with_temperature",
        applies=lambda caps, values: (
            caps.top_p_exclusive_with_temperature and "temperature" in values
        ),
        drops=frozenset({"top_p"}),
    ),
    # Greedy decoding requires top_p to stay at the provider default.
    DegradationRule(
        name="greedy_requires_default_top_p",
        applies=lambda caps, values: (
            caps.greedy_requires_default_top_p and values.get("temperature") == 0
        ),
        drops=frozenset({"top_p"}),
    ),
)

_THINKING_ENCODERS: dict[str, Callable[[Any], dict[str, Any]]] = {
    "reasoning_effort": lambda token: {"reasoning_effort": token},
    "reasoning_effort_hidden": lambda token: {
        "reasoning_effort": token,
        "include_reasoning": False,
    },
    "thinking_budget": lambda token: {
        "thinking_config": {"include_thoughts": False, "thinking_budget": token}
    },
}


def apply_degradation_rules(
    values: Mapping[str, Any], capabilities: CapabilityRecord
) -> dict[str, Any]:
    """Return *values* minus every field a matching rule drops."""
    kept = dict(values)
    for rule in DEGRADATION_RULES:
        if not rule.applies(capabilities, kept):
            continue
        dropped = sorted(name for name in rule.drops if name in kept)
        for name in dropped:
            del kept[name]
        if dropped:
            logger.debug(
                "Rule %s dropped %s for %s",
                rule.name,
                ", ".join(dropped),
                capabilities.provider,
            )
    return kept


def resolve_thinking(
    requested: ThinkingLevel | None,
    default: ThinkingLevel | None,
    capabilities: CapabilityRecord,
) -> ThinkingLevel | None:
    """Pick the effective thinking level, or None when it must be omitted."""
    level = requested if requested is not None else default
    if level is None or not capabilities.supports_thinking:
        return None
    if level == "off" and capabilities.thinking_required:
        level = capabilities.lowest_thinking_level()
    if level is None or level not in capabilities.thinking_vocabulary:
        return None
    return level


def translate_parameters(
    options: RequestOptions,
    capabilities: CapabilityRecord,
    *,
    default_thinking: ThinkingLevel | None = None,
) -> dict[str, Any]:
    """Map request options onto the provider's wire fields.

    Deterministic: the same options and record always give an equal dict
    with the same key order.
    """
    values = apply_degradation_rules(options.generation_values(), capabilities)

    fields: dict[str, Any] = {}
    for name, value in values.items():
        wire_name = capabilities.field_names.get(name)
        if wire_name is None:
            logger.debug("%s has no %s field; dropped", capabilities.provider, name)
            continue
        fields[wire_name] = value

    max_tokens_field = capabilities.field_names.get("max_tokens")
    if (
        max_tokens_field is not None
        and max_tokens_field not in fields
        and capabilities.default_max_tokens is not None
    ):
        fields[max_tokens_field] = capabilities.default_max_tokens

    level = resolve_thinking(options.thinking, default_thinking, capabilities)
    encoder = _THINKING_ENCODERS.get(capabilities.thinking_encoding or "")
    if level is not None and encoder is not None:
        fields.update(encoder(capabilities.thinking_vocabulary[level]))
    elif options.thinking is not None or default_thinking is not None:
        logger.debug("Thinking not supported by %s; dropped", capabilities.provider)

    return fields
