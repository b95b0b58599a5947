"""Real API integration tests.

These tests make real provider calls and are intentionally compact:
- ENABLE_API_TESTS=1 is required to run any API tests
- each provider's API key variable is required for its cases

One call per operation per provider keeps the budget small.
"""

from __future__ import annotations

import os

from pydantic import BaseModel
import pytest

import chorus
from chorus import Failure

pytestmark = pytest.mark.api

# Cheapest catalogue model per provider.
_LIVE_MODELS: list[tuple[str, str, str]] = [
    ("openai", "gpt-4.1-nano", "OPENAI_API_KEY"),
    ("claude", "claude-3-5-haiku-latest", "ANTHROPIC_API_KEY"),
    ("gemini", "gemini-2.5-flash-lite", "GEMINI_API_KEY"),
    ("groq", "llama-3.1-8b-instant", "GROQ_API_KEY"),
    ("mistral", "ministral-3b-latest", "MISTRAL_API_KEY"),
]


class Greeting(BaseModel):
    greeting: str
    language: str


def _client(provider: str, model: str, env_var: str) -> chorus.Client:
    if not os.getenv(env_var):
        pytest.skip(f"{env_var} not set")
    return chorus.create_client(provider, model)


@pytest.mark.asyncio
@pytest.mark.parametrize(("provider", "model", "env_var"), _LIVE_MODELS)
async def test_ask_returns_text(provider: str, model: str, env_var: str) -> None:
    async with _client(provider, model, env_var) as client:
        answer = await client.ask(
            "What is 2+2? Answer with the number only.",
            chorus.RequestOptions(temperature=0, max_tokens=20),
        )

    assert not isinstance(answer, Failure), answer
    assert "4" in answer


@pytest.mark.asyncio
@pytest.mark.parametrize(("provider", "model", "env_var"), _LIVE_MODELS)
async def test_ask_json_returns_validated_model(
    provider: str, model: str, env_var: str
) -> None:
    async with _client(provider, model, env_var) as client:
        value = await client.ask_json(
            "Say hello in Spanish. Report the greeting and the language name.",
            schema=Greeting,
        )

    assert isinstance(value, Greeting), value
    assert value.greeting


@pytest.mark.asyncio
@pytest.mark.parametrize(("provider", "model", "env_var"), _LIVE_MODELS)
async def test_stream_counts(provider: str, model: str, env_var: str) -> None:
    async with _client(provider, model, env_var) as client:
        fragments = [
            fragment
            async for fragment in client.stream(
                "Count from 1 to 3, one number per line, nothing else."
            )
        ]

    assert fragments
    text = "".join(fragments)
    for digit in ("1", "2", "3"):
        assert digit in text
