"""Capability model: static per-provider and per-model facts.

Every provider difference the engine cares about lives here as data. The
message normalizer, parameter translator and structured-output strategy run
one generic algorithm each and read their branching decisions from a
``CapabilityRecord``.

Records are built once at import and are frozen. ``get_capabilities`` never
fails: an unknown model resolves to the provider's base record, which keeps
the wire facts but switches off native JSON schema, thinking and the
temperature/top_p exclusivity rule.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Literal

from chorus.types import PROVIDERS, ProviderName, ThinkingLevel

SystemChannel = Literal["message", "field"]
ContentFormat = Literal["text", "parts"]
StructuredMode = Literal["native", "tool", "prompt"]
NativeSchemaStyle = Literal["response_format", "response_json_schema"]
ThinkingEncoding = Literal[
    "reasoning_effort", "reasoning_effort_hidden", "thinking_budget"
]


def _frozen(mapping: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class CapabilityRecord:
    """What a provider/model accepts, and how its wire format is shaped."""

    provider: ProviderName
    supports_native_json_schema: bool = False
    supports_thinking: bool = False
    #: The model only accepts its default sampling; explicit values error.
    temperature_locked: bool = False
    top_p_exclusive_with_temperature: bool = False
    #: Roles the provider accepts natively in its message list.
    role_support: frozenset[str] = frozenset({"system", "user", "assistant"})
    #: Thinking level -> provider token (effort string or token budget).
    thinking_vocabulary: Mapping[str, Any] = field(default_factory=_frozen)
    #: The model always reasons; ``off`` is raised to the lowest level.
    thinking_required: bool = False
    thinking_encoding: ThinkingEncoding | None = None
    #: Greedy requests (temperature 0) must leave top_p at its default.
    greedy_requires_default_top_p: bool = False
    system_channel: SystemChannel = "message"
    #: Unsupported role -> replacement role. Missing entries downgrade to user.
    role_downgrades: Mapping[str, str] = field(default_factory=_frozen)
    #: Generic role -> wire role, applied after downgrading.
    role_aliases: Mapping[str, str] = field(default_factory=_frozen)
    content_format: ContentFormat = "text"
    #: Generic parameter -> wire field. Absent parameters are dropped.
    field_names: Mapping[str, str] = field(default_factory=_frozen)
    default_max_tokens: int | None = None
    native_schema_style: NativeSchemaStyle | None = None
    #: Strategy used when native JSON schema is unavailable.
    structured_fallback: Literal["tool", "prompt"] = "prompt"
    supports_json_object: bool = False
    #: Start/end markers of an inline reasoning block to strip from answers.
    reasoning_markup: tuple[str, str] | None = None

    @property
    def structured_mode(self) -> StructuredMode:
        """Structured-output strategy for this record."""
        if self.supports_native_json_schema and self.native_schema_style is not None:
            return "native"
        return self.structured_fallback

    def lowest_thinking_level(self) -> ThinkingLevel | None:
        """Return the lowest non-off level this record can express."""
        for level in ("low", "medium", "high"):
            if level in self.thinking_vocabulary:
                return level  # type: ignore[return-value]
        return None


_CHAT_FIELDS = {
    "temperature": "temperature",
    "top_p": "top_p",
    "presence_penalty": "presence_penalty",
    "frequency_penalty": "frequency_penalty",
    "user": "user",
}

_EFFORT_VOCABULARY = {"low": "low", "medium": "medium", "high": "high"}

_PROVIDER_BASE: dict[ProviderName, CapabilityRecord] = {
    "openai": CapabilityRecord(
        provider="openai",
        field_names=_frozen({**_CHAT_FIELDS, "max_tokens": "max_completion_tokens"}),
        native_schema_style="response_format",
        structured_fallback="prompt",
        supports_json_object=True,
        thinking_encoding="reasoning_effort",
    ),
    "claude": CapabilityRecord(
        provider="claude",
        role_support=frozenset({"user", "assistant"}),
        system_channel="field",
        field_names=_frozen(
            {
                "temperature": "temperature",
                "top_p": "top_p",
                "top_k": "top_k",
                "max_tokens": "max_tokens",
            }
        ),
        default_max_tokens=4096,
        structured_fallback="tool",
    ),
    "gemini": CapabilityRecord(
        provider="gemini",
        role_support=frozenset({"user", "assistant"}),
        system_channel="field",
        role_aliases=_frozen({"assistant": "model"}),
        content_format="parts",
        field_names=_frozen(
            {
                "temperature": "temperature",
                "top_p": "top_p",
                "top_k": "top_k",
                "max_tokens": "max_output_tokens",
            }
        ),
        native_schema_style="response_json_schema",
        structured_fallback="prompt",
        thinking_encoding="thinking_budget",
    ),
    "groq": CapabilityRecord(
        provider="groq",
        field_names=_frozen({**_CHAT_FIELDS, "max_tokens": "max_tokens"}),
        native_schema_style="response_format",
        structured_fallback="prompt",
        supports_json_object=True,
        thinking_encoding="reasoning_effort_hidden",
        reasoning_markup=("<think>", "</think>"),
    ),
    "mistral": CapabilityRecord(
        provider="mistral",
        role_support=frozenset({"system", "user", "assistant", "tool"}),
        role_downgrades=_frozen({"function": "tool"}),
        field_names=_frozen(
            {
                "temperature": "temperature",
                "top_p": "top_p",
                "max_tokens": "max_tokens",
                "presence_penalty": "presence_penalty",
                "frequency_penalty": "frequency_penalty",
            }
        ),
        greedy_requires_default_top_p=True,
        structured_fallback="prompt",
        supports_json_object=True,
    ),
}

_OPENAI_CHAT = {
    "supports_native_json_schema": True,
    "top_p_exclusive_with_temperature": True,
}
_OPENAI_REASONING = {
    **_OPENAI_CHAT,
    "temperature_locked": True,
    "supports_thinking": True,
    "thinking_required": True,
    "thinking_vocabulary": _frozen(_EFFORT_VOCABULARY),
}
_GEMINI = {
    "supports_native_json_schema": True,
    "top_p_exclusive_with_temperature": True,
    "supports_thinking": True,
    "thinking_vocabulary": _frozen(
        {"off": 0, "low": 512, "medium": 2_048, "high": 24_576}
    ),
}
_GEMINI_BUDGET_ONLY = {**_GEMINI, "thinking_required": True}
_GROQ_PLAIN = {"top_p_exclusive_with_temperature": True}
_GROQ_SCHEMA = {**_GROQ_PLAIN, "supports_native_json_schema": True}
_GROQ_GPT_OSS = {
    **_GROQ_SCHEMA,
    "supports_thinking": True,
    "thinking_required": True,
    "thinking_vocabulary": _frozen(_EFFORT_VOCABULARY),
}
_GROQ_QWEN = {
    **_GROQ_PLAIN,
    "supports_thinking": True,
    "thinking_vocabulary": _frozen(
        {"off": "none", "low": "default", "medium": "default", "high": "default"}
    ),
}

_MODEL_FEATURES: dict[ProviderName, dict[str, dict[str, Any]]] = {
    "openai": {
        "gpt-4.1": _OPENAI_CHAT,
        "gpt-4.1-mini": _OPENAI_CHAT,
        "gpt-4.1-nano": _OPENAI_CHAT,
        "gpt-5": _OPENAI_REASONING,
        "gpt-5-mini": _OPENAI_REASONING,
        "gpt-5-nano": _OPENAI_REASONING,
        "o3": _OPENAI_REASONING,
        "o3-mini": _OPENAI_REASONING,
        "o4-mini": _OPENAI_REASONING,
    },
    "claude": {
        "claude-sonnet-4-0": {"top_p_exclusive_with_temperature": True},
        "claude-opus-4-1": {"top_p_exclusive_with_temperature": True},
        "claude-3-5-haiku-latest": {"top_p_exclusive_with_temperature": True},
    },
    "gemini": {
        "gemini-2.5-pro": _GEMINI_BUDGET_ONLY,
        "gemini-2.5-flash": _GEMINI,
        "gemini-2.5-flash-lite": _GEMINI,
    },
    "groq": {
        "llama-3.3-70b-versatile": _GROQ_PLAIN,
        "llama-3.1-8b-instant": _GROQ_PLAIN,
        "openai/gpt-oss-20b": _GROQ_GPT_OSS,
        "openai/gpt-oss-120b": _GROQ_GPT_OSS,
        "moonshotai/kimi-k2-instruct": _GROQ_SCHEMA,
        "meta-llama/llama-4-maverick-17b-128e-instruct": _GROQ_SCHEMA,
        "meta-llama/llama-4-scout-17b-16e-instruct": _GROQ_SCHEMA,
        "deepseek-r1-distill-llama-70b": _GROQ_PLAIN,
        "qwen/qwen3-32b": _GROQ_QWEN,
    },
    "mistral": {
        model: {}
        for model in (
            "magistral-medium-latest",
            "magistral-small-latest",
            "mistral-medium-latest",
            "mistral-large-latest",
            "ministral-3b-latest",
            "ministral-8b-latest",
            "open-mistral-nemo",
            "mistral-small-latest",
            "devstral-small-latest",
            "devstral-medium-latest",
            "mistral-saba-latest",
        )
    },
}

_RECORDS: dict[tuple[str, str], CapabilityRecord] = {
    (provider, model): replace(_PROVIDER_BASE[provider], **features)
    for provider, models in _MODEL_FEATURES.items()
    for model, features in models.items()
}

#: Known model identifiers per provider, in catalogue order.
MODELS: Mapping[ProviderName, tuple[str, ...]] = MappingProxyType(
    {provider: tuple(_MODEL_FEATURES[provider]) for provider in PROVIDERS}
)
OPENAI_MODELS = MODELS["openai"]
CLAUDE_MODELS = MODELS["claude"]
GEMINI_MODELS = MODELS["gemini"]
GROQ_MODELS = MODELS["groq"]
MISTRAL_MODELS = MODELS["mistral"]


def get_capabilities(provider: ProviderName, model: str) -> CapabilityRecord:
    """Return the capability record for ``(provider, model)``.

    Unknown models get the provider's most restrictive record.
    """
    record = _RECORDS.get((provider, model))
    if record is not None:
        return record
    return _PROVIDER_BASE[provider]


def is_known_model(provider: ProviderName, model: str) -> bool:
    """Whether *model* is in the provider's catalogue."""
    return (provider, model) in _RECORDS
