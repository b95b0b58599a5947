"""Chorus: one way to talk to many LLM providers.

Public API:
    - create_client(): Bind a provider and model
    - Client: ask(), ask_json(), stream()
    - RequestOptions: Per-request generation options
    - Failure: Provider-side failure returned by ask()/ask_json()
"""

from __future__ import annotations

import logging

from chorus.capabilities import (
    CLAUDE_MODELS,
    GEMINI_MODELS,
    GROQ_MODELS,
    MISTRAL_MODELS,
    MODELS,
    OPENAI_MODELS,
    CapabilityRecord,
    get_capabilities,
)
from chorus.client import Client, create_client
from chorus.config import ClientConfig
from chorus.errors import (
    APIError,
    ChorusError,
    ConfigurationError,
    EmptyResponseError,
    MalformedJSONError,
    RateLimitError,
    SchemaViolationError,
)
from chorus.options import RequestOptions
from chorus.result import Failure, FailureKind
from chorus.types import PROVIDERS, THINKING_LEVELS, Message

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("chorus-ai")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("chorus").addHandler(logging.NullHandler())

__all__ = [
    "CLAUDE_MODELS",
    "GEMINI_MODELS",
    "GROQ_MODELS",
    "MISTRAL_MODELS",
    "MODELS",
    "OPENAI_MODELS",
    "PROVIDERS",
    "THINKING_LEVELS",
    "APIError",
    "CapabilityRecord",
    "ChorusError",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "EmptyResponseError",
    "Failure",
    "FailureKind",
    "MalformedJSONError",
    "Message",
    "RateLimitError",
    "RequestOptions",
    "SchemaViolationError",
    "create_client",
    "get_capabilities",
]
