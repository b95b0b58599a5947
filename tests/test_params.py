"""Parameter translation tests: gating, degradation and thinking encoding."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st
import pytest

from chorus.capabilities import get_capabilities
from chorus.errors import ConfigurationError
from chorus.options import RequestOptions
from chorus.params import (
    DEGRADATION_RULES,
    apply_degradation_rules,
    resolve_thinking,
    translate_parameters,
)
from tests.conftest import PROVIDER_MODELS

pytestmark = pytest.mark.unit

_options = st.builds(
    RequestOptions,
    temperature=st.one_of(st.none(), st.floats(0, 2)),
    top_p=st.one_of(st.none(), st.floats(0, 1)),
    top_k=st.one_of(st.none(), st.integers(1, 100)),
    max_tokens=st.one_of(st.none(), st.integers(1, 8192)),
    presence_penalty=st.one_of(st.none(), st.floats(-2, 2)),
    frequency_penalty=st.one_of(st.none(), st.floats(-2, 2)),
    thinking=st.one_of(st.none(), st.sampled_from(["off", "low", "medium", "high"])),
    user=st.one_of(st.none(), st.text(min_size=1, max_size=8)),
)


# =============================================================================
# Determinism and Gating
# =============================================================================


@pytest.mark.parametrize(("provider", "model"), PROVIDER_MODELS)
@given(options=_options)
def test_translation_is_deterministic(
    provider: str, model: str, options: RequestOptions
) -> None:
    caps = get_capabilities(provider, model)  # type: ignore[arg-type]

    first = translate_parameters(options, caps)
    second = translate_parameters(options, caps)

    assert first == second
    assert list(first) == list(second)


@given(options=_options)
def test_locked_model_never_receives_sampling_fields(options: RequestOptions) -> None:
    fields = translate_parameters(options, get_capabilities("openai", "gpt-5"))

    assert not {"temperature", "top_p", "presence_penalty", "frequency_penalty"} & set(
        fields
    )


@given(options=_options)
def test_thinking_is_omitted_without_support(options: RequestOptions) -> None:
    fields = translate_parameters(options, get_capabilities("openai", "gpt-4.1"))

    assert "reasoning_effort" not in fields


def test_unsupported_fields_are_dropped_silently() -> None:
    caps = get_capabilities("openai", "gpt-4.1")

    fields = translate_parameters(RequestOptions(top_k=40, max_tokens=100), caps)

    assert fields == {"max_completion_tokens": 100}


def test_fields_are_renamed_to_wire_names() -> None:
    caps = get_capabilities("gemini", "gemini-2.5-flash")

    fields = translate_parameters(RequestOptions(top_k=5, max_tokens=64), caps)

    assert fields == {"top_k": 5, "max_output_tokens": 64}


def test_values_are_forwarded_unclamped() -> None:
    caps = get_capabilities("groq", "llama-3.3-70b-versatile")

    fields = translate_parameters(RequestOptions(temperature=7.5), caps)

    assert fields["temperature"] == 7.5


def test_claude_defaults_max_tokens() -> None:
    caps = get_capabilities("claude", "claude-sonnet-4-0")

    assert translate_parameters(RequestOptions(), caps) == {"max_tokens": 4096}
    assert translate_parameters(RequestOptions(max_tokens=10), caps) == {
        "max_tokens": 10
    }


# =============================================================================
# Degradation Rules
# =============================================================================


def test_rules_are_listed_in_precedence_order() -> None:
    assert [rule.name for rule in DEGRADATION_RULES] == [
        "temperature_locked",
        "top_p_exclusive_with_temperature",
        "greedy_requires_default_top_p",
    ]


def test_temperature_wins_over_top_p_when_exclusive() -> None:
    caps = get_capabilities("claude", "claude-sonnet-4-0")

    kept = apply_degradation_rules({"temperature": 0.3, "top_p": 0.9}, caps)

    assert kept == {"temperature": 0.3}


def test_top_p_survives_without_temperature() -> None:
    caps = get_capabilities("claude", "claude-sonnet-4-0")

    assert apply_degradation_rules({"top_p": 0.9}, caps) == {"top_p": 0.9}


def test_mistral_keeps_top_p_with_non_greedy_temperature() -> None:
    caps = get_capabilities("mistral", "mistral-small-latest")

    fields = translate_parameters(RequestOptions(temperature=0.7, top_p=0.9), caps)

    assert fields == {"temperature": 0.7, "top_p": 0.9}


def test_mistral_greedy_request_drops_top_p() -> None:
    caps = get_capabilities("mistral", "mistral-small-latest")

    fields = translate_parameters(RequestOptions(temperature=0, top_p=0.9), caps)

    assert fields == {"temperature": 0}


def test_locked_model_drops_penalties_too() -> None:
    caps = get_capabilities("openai", "o4-mini")

    fields = translate_parameters(
        RequestOptions(temperature=0.2, presence_penalty=1.0, max_tokens=50), caps
    )

    assert fields == {"max_completion_tokens": 50}


# =============================================================================
# Thinking
# =============================================================================


def test_openai_off_is_raised_to_low() -> None:
    caps = get_capabilities("openai", "gpt-5")

    fields = translate_parameters(RequestOptions(thinking="off"), caps)

    assert fields == {"reasoning_effort": "low"}


def test_client_default_thinking_applies_when_request_is_silent() -> None:
    caps = get_capabilities("openai", "gpt-5")

    fields = translate_parameters(RequestOptions(), caps, default_thinking="high")

    assert fields == {"reasoning_effort": "high"}


def test_request_thinking_overrides_client_default() -> None:
    caps = get_capabilities("openai", "gpt-5")

    assert resolve_thinking("medium", "high", caps) == "medium"


def test_gemini_encodes_thinking_budget() -> None:
    caps = get_capabilities("gemini", "gemini-2.5-flash")

    fields = translate_parameters(RequestOptions(thinking="off"), caps)

    assert fields == {
        "thinking_config": {"include_thoughts": False, "thinking_budget": 0}
    }


def test_gemini_pro_cannot_switch_thinking_off() -> None:
    caps = get_capabilities("gemini", "gemini-2.5-pro")

    fields = translate_parameters(RequestOptions(thinking="off"), caps)

    assert fields["thinking_config"]["thinking_budget"] == 512


def test_groq_hides_reasoning() -> None:
    caps = get_capabilities("groq", "qwen/qwen3-32b")

    fields = translate_parameters(RequestOptions(thinking="off"), caps)

    assert fields == {"reasoning_effort": "none", "include_reasoning": False}


def test_groq_gpt_oss_raises_off_to_low() -> None:
    caps = get_capabilities("groq", "openai/gpt-oss-20b")

    fields = translate_parameters(RequestOptions(thinking="off"), caps)

    assert fields == {"reasoning_effort": "low", "include_reasoning": False}


def test_thinking_dropped_for_claude() -> None:
    caps = get_capabilities("claude", "claude-sonnet-4-0")

    fields = translate_parameters(RequestOptions(thinking="high"), caps)

    assert fields == {"max_tokens": 4096}


# =============================================================================
# Option Validation
# =============================================================================


@pytest.mark.parametrize(
    "kwargs",
    [
        {"temperature": "hot"},
        {"temperature": True},
        {"max_tokens": 1.5},
        {"thinking": "extreme"},
        {"messages": "hello"},
        {"instructions": 42},
    ],
)
def test_bad_options_raise_configuration_error(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        RequestOptions(**kwargs)


def test_generation_values_keep_translation_order() -> None:
    options = RequestOptions(user="u1", max_tokens=5, temperature=0.1)

    assert list(options.generation_values()) == ["temperature", "max_tokens", "user"]
