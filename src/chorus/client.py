"""Client façade: one bound provider, three operations.

``ask()`` and ``ask_json()`` never raise for provider-side problems; they
return a ``Failure``. ``stream()`` raises ``APIError`` at the point of
iteration where the provider fails. Caller mistakes (bad options, bad
schema) raise ``ConfigurationError`` before any network call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from chorus.capabilities import get_capabilities
from chorus.config import ClientConfig
from chorus.errors import ConfigurationError
from chorus.messages import build_conversation, normalize_messages
from chorus.options import RequestOptions
from chorus.params import translate_parameters
from chorus.providers.anthropic import AnthropicProvider
from chorus.providers.gemini import GeminiProvider
from chorus.providers.groq import GroqProvider
from chorus.providers.mistral import MistralProvider
from chorus.providers.mock import MockProvider
from chorus.providers.models import ProviderRequest
from chorus.providers.openai import OpenAIProvider
from chorus.schema import resolve_schema
from chorus.structured import plan_structured_output
from chorus.unify import (
    failure_from_exception,
    unify_stream,
    unify_structured,
    unify_text,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from types import TracebackType

    from chorus.capabilities import CapabilityRecord
    from chorus.providers.base import Provider
    from chorus.result import Failure
    from chorus.schema import SchemaInput
    from chorus.types import ProviderName, ThinkingLevel

logger = logging.getLogger(__name__)

_PROVIDER_FACTORIES: dict[ProviderName, Callable[..., Provider]] = {
    "openai": OpenAIProvider,
    "claude": AnthropicProvider,
    "gemini": GeminiProvider,
    "groq": GroqProvider,
    "mistral": MistralProvider,
}


def _bind_provider(config: ClientConfig) -> Provider:
    """Get the adapter for the configured provider."""
    if config.use_mock:
        return MockProvider(config.provider)

    if not config.api_key:
        raise ConfigurationError(
            "api_key required for real API",
            hint="Pass api_key=... or set the provider's API key variable.",
        )
    factory = _PROVIDER_FACTORIES[config.provider]
    return factory(config.api_key, base_url=config.base_url)


class Client:
    """A configured connection to one provider/model pair.

    The provider adapter and capability record are resolved once, here;
    no per-call code branches on the provider's identity.

    Example:
        client = create_client("claude", model="claude-sonnet-4-0")
        answer = await client.ask("Say hi")
        if isinstance(answer, Failure):
            print(answer.kind, answer.message)
    """

    def __init__(
        self, config: ClientConfig, *, provider: Provider | None = None
    ) -> None:
        """Bind *config*; *provider* overrides the adapter the config selects."""
        self.config = config
        self.capabilities: CapabilityRecord = get_capabilities(
            config.provider, config.model
        )
        self._provider = provider if provider is not None else _bind_provider(config)

    @property
    def provider(self) -> ProviderName:
        """Canonical name of the bound provider."""
        return self.config.provider

    @property
    def model(self) -> str:
        """Model identifier sent with every request."""
        return self.config.model

    def __repr__(self) -> str:
        return f"Client(provider={self.provider!r}, model={self.model!r})"

    def build_request(
        self,
        prompt: str,
        options: RequestOptions | None = None,
        *,
        instructions: str | None = None,
        extra_fields: dict[str, Any] | None = None,
    ) -> ProviderRequest:
        """Build the provider payload for one call.

        Args:
            prompt: Appended as the final user turn.
            options: Per-request options; ``None`` means defaults.
            instructions: Replaces the resolved instructions when given.
            extra_fields: Request fields merged after parameter translation.
        """
        if not isinstance(prompt, str):
            raise ConfigurationError(
                f"prompt must be a string, got {type(prompt).__name__}",
                hint="Pass the user input as text.",
            )
        opts = options if options is not None else RequestOptions()
        if instructions is None:
            instructions = self._instructions(opts)

        conversation = build_conversation(
            opts.messages,  # type: ignore[arg-type]
            prompt,
        )
        normalized = normalize_messages(conversation, instructions, self.capabilities)
        fields = translate_parameters(
            opts, self.capabilities, default_thinking=self.config.thinking
        )
        if extra_fields:
            fields.update(extra_fields)
        return ProviderRequest(
            model=self.model,
            messages=normalized.messages,
            system=normalized.system,
            fields=fields,
        )

    def _instructions(self, options: RequestOptions) -> str | None:
        if options.instructions is not None:
            return options.instructions
        return self.config.instructions

    async def ask(
        self, prompt: str, options: RequestOptions | None = None
    ) -> str | Failure:
        """Send *prompt* and return the answer text.

        Returns:
            The answer (``""`` when the provider sent no content), or a
            ``Failure`` of kind ``transport`` when the call failed.
        """
        request = self.build_request(prompt, options)
        try:
            response = await self._provider.complete(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return failure_from_exception(e, provider=self.provider, phase="ask")
        return unify_text(response, self.capabilities)

    async def ask_json(
        self,
        prompt: str,
        *,
        schema: SchemaInput,
        options: RequestOptions | None = None,
    ) -> Any:
        """Send *prompt* and return a value validated against *schema*.

        Args:
            prompt: The user input.
            schema: Pydantic model class or JSON Schema dict.
            options: Per-request options.

        Returns:
            A model instance (or the validated JSON value for dict schemas),
            or a ``Failure`` of kind ``transport``, ``empty_response``,
            ``malformed_json`` or ``schema_violation``.
        """
        descriptor = resolve_schema(schema)
        opts = options if options is not None else RequestOptions()
        plan = plan_structured_output(
            descriptor, self.capabilities, self._instructions(opts)
        )
        request = self.build_request(
            prompt, opts, instructions=plan.instructions, extra_fields=plan.fields
        )
        try:
            response = await self._provider.complete(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return failure_from_exception(e, provider=self.provider, phase="ask_json")
        return unify_structured(response, descriptor, plan, self.capabilities)

    def stream(
        self, prompt: str, options: RequestOptions | None = None
    ) -> AsyncIterator[str]:
        """Stream the answer as non-empty text fragments, in order.

        The request is built immediately; the provider is contacted on
        first iteration.

        Raises:
            APIError: During iteration, when the provider call fails.
        """
        request = self.build_request(prompt, options)
        return unify_stream(self._provider.stream(request), provider=self.provider)

    async def aclose(self) -> None:
        """Release the provider's SDK client."""
        try:
            await self._provider.aclose()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Provider cleanup failed: %s", exc)

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_client(
    provider: str,
    model: str,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    instructions: str | None = None,
    thinking: ThinkingLevel | None = None,
    use_mock: bool = False,
) -> Client:
    """Create a client bound to *provider* and *model*.

    Raises:
        ConfigurationError: Unknown provider or model, bad thinking level,
            or no API key available.
    """
    config = ClientConfig(
        provider=provider,  # type: ignore[arg-type]
        model=model,
        api_key=api_key,
        base_url=base_url,
        instructions=instructions,
        thinking=thinking,
        use_mock=use_mock,
    )
    return Client(config)
