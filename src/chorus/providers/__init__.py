"""Provider implementations."""

from .anthropic import AnthropicProvider
from .base import Provider
from .gemini import GeminiProvider
from .groq import GroqProvider
from .mistral import MistralProvider
from .mock import MockProvider
from .openai import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "GeminiProvider",
    "GroqProvider",
    "MistralProvider",
    "MockProvider",
    "OpenAIProvider",
    "Provider",
]
