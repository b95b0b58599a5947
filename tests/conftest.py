"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, a scripted provider
double, and automatic API test skipping. Fixtures marked autouse apply to
every test.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import TYPE_CHECKING, Any

import pytest

from chorus.client import Client
from chorus.config import ClientConfig
from chorus.providers.models import ProviderRequest, ProviderResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

OPENAI_MODEL = "gpt-4.1-mini"
CLAUDE_MODEL = "claude-sonnet-4-0"
GEMINI_MODEL = "gemini-2.5-flash"
GROQ_MODEL = "llama-3.3-70b-versatile"
MISTRAL_MODEL = "mistral-small-latest"

#: Every provider paired with a representative catalogue model.
PROVIDER_MODELS: tuple[tuple[str, str], ...] = (
    ("openai", OPENAI_MODEL),
    ("claude", CLAUDE_MODEL),
    ("gemini", GEMINI_MODEL),
    ("groq", GROQ_MODEL),
    ("mistral", MISTRAL_MODEL),
)

_PROVIDER_ENV_PREFIXES = (
    "OPENAI_",
    "ANTHROPIC_",
    "CLAUDE_",
    "GEMINI_",
    "GOOGLE_",
    "GROQ_",
    "MISTRAL_",
)

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeProvider:
    """Provider test double for client behavior verification.

    Records every request and replays scripted responses. ``error`` makes
    both calls fail; ``fail_after`` makes a stream fail after that many
    deltas.
    """

    name: str = "openai"
    response: ProviderResponse = field(
        default_factory=lambda: ProviderResponse(text="ok")
    )
    deltas: list[str | None] = field(default_factory=list)
    error: BaseException | None = None
    fail_after: int | None = None
    requests: list[ProviderRequest] = field(default_factory=list)
    closed: bool = False

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    async def stream(self, request: ProviderRequest) -> AsyncIterator[str | None]:
        self.requests.append(request)
        if self.error is not None and self.fail_after is None:
            raise self.error
        for index, delta in enumerate(self.deltas):
            if self.fail_after is not None and index == self.fail_after:
                assert self.error is not None
                raise self.error
            yield delta

    async def aclose(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> ProviderRequest:
        assert self.requests, "no request was sent"
        return self.requests[-1]


@pytest.fixture
def make_client() -> Callable[..., tuple[Client, FakeProvider]]:
    """Build a client for ``(provider, model)`` bound to a FakeProvider."""

    def _make(
        provider: str = "openai",
        model: str = OPENAI_MODEL,
        *,
        instructions: str | None = None,
        thinking: Any = None,
        **fake_kwargs: Any,
    ) -> tuple[Client, FakeProvider]:
        config = ClientConfig(
            provider=provider,  # type: ignore[arg-type]
            model=model,
            instructions=instructions,
            thinking=thinking,
            use_mock=True,
        )
        fake = FakeProvider(name=config.provider, **fake_kwargs)
        return Client(config, provider=fake), fake

    return _make


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Clears every provider API key variable to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(_PROVIDER_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def openai_model() -> str:
    return OPENAI_MODEL


@pytest.fixture
def claude_model() -> str:
    return CLAUDE_MODEL


@pytest.fixture
def gemini_model() -> str:
    return GEMINI_MODEL
