"""Response unification: provider results -> the uniform output contract."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from chorus.errors import ChorusError
from chorus.providers._errors import wrap_provider_error
from chorus.result import Failure
from chorus.structured import parse_structured, strip_reasoning

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chorus.capabilities import CapabilityRecord
    from chorus.providers.models import ProviderResponse
    from chorus.schema import SchemaDescriptor
    from chorus.structured import StructuredPlan

logger = logging.getLogger(__name__)


def unify_text(response: ProviderResponse, capabilities: CapabilityRecord) -> str:
    """Return the answer text; missing content is an empty string."""
    return strip_reasoning(response.text or "", capabilities.reasoning_markup)


def unify_structured(
    response: ProviderResponse,
    schema: SchemaDescriptor[Any],
    plan: StructuredPlan,
    capabilities: CapabilityRecord,
) -> Any:
    """Return the validated value, or a Failure describing what went wrong."""
    try:
        return parse_structured(response, schema, plan, capabilities)
    except ChorusError as e:
        logger.debug(
            "Structured answer from %s rejected (%s): %s",
            capabilities.provider,
            e.failure_kind,
            e,
        )
        return Failure.from_error(e)


def failure_from_exception(exc: BaseException, *, provider: str, phase: str) -> Failure:
    """Turn any provider-side exception into a transport Failure.

    ``asyncio.CancelledError`` propagates instead.
    """
    error = wrap_provider_error(exc, provider=provider, phase=phase)
    logger.debug("%s %s failed: %s", provider, phase, error)
    return Failure.from_error(error)


async def unify_stream(
    deltas: AsyncIterator[str | None], *, provider: str
) -> AsyncIterator[str]:
    """Forward text-bearing deltas verbatim and in order.

    Empty deltas are skipped. Provider failures raise ``APIError`` at the
    point of iteration where they happen.
    """
    try:
        async for delta in deltas:
            if delta:
                yield delta
    except asyncio.CancelledError:
        raise
    except ChorusError:
        raise
    except Exception as e:
        raise wrap_provider_error(e, provider=provider, phase="stream") from e
