"""Structured output strategies and the post-call extraction step.

Three interchangeable techniques, picked only from the capability record:

- ``native``: the schema rides along as a structured-response directive and
  the provider enforces it during generation.
- ``tool``: one synthetic tool takes the schema as its input schema and the
  model is forced to call it; the call arguments are the answer.
- ``prompt``: the schema is written into the instructions with a JSON-only
  directive, plus a generic JSON-object mode where the provider has one.

Whatever the mode, the answer is extracted, stripped of inline reasoning
markup, parsed and validated the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import TYPE_CHECKING, Any

from chorus.errors import EmptyResponseError, MalformedJSONError
from chorus.messages import SYSTEM_SEPARATOR

if TYPE_CHECKING:
    from chorus.capabilities import CapabilityRecord, StructuredMode
    from chorus.providers.models import ProviderResponse
    from chorus.schema import SchemaDescriptor

logger = logging.getLogger(__name__)

SCHEMA_NAME = "response"
JSON_TOOL_NAME = "json_response"
JSON_TOOL_DESCRIPTION = "Respond with structured JSON data"
JSON_ONLY_DIRECTIVE = (
    "Answer with JSON only, no prose and no markdown code fences. "
    "Follow this exact schema:"
)


@dataclass(frozen=True)
class StructuredPlan:
    """How one structured request is elicited from the provider."""

    mode: StructuredMode
    #: Extra provider request fields.
    fields: dict[str, Any] = field(default_factory=dict)
    #: Effective instructions, including any injected schema text.
    instructions: str | None = None


def _native_fields(style: str | None, schema: dict[str, Any]) -> dict[str, Any]:
    if style == "response_json_schema":
        return {
            "response_mime_type": "application/json",
            "response_json_schema": schema,
        }
    return {
        "response_format": {
            "type": "json_schema",
            "json_schema": {"name": SCHEMA_NAME, "schema": schema},
        }
    }


def _forced_tool_fields(schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "tools": [
            {
                "name": JSON_TOOL_NAME,
                "description": JSON_TOOL_DESCRIPTION,
                "input_schema": schema,
            }
        ],
        "tool_choice": {"type": "tool", "name": JSON_TOOL_NAME},
    }


def schema_instructions(schema: dict[str, Any], instructions: str | None) -> str:
    """Append the JSON-only directive and the pretty-printed schema."""
    directive = f"{JSON_ONLY_DIRECTIVE}\n\n{json.dumps(schema, indent=2)}"
    if instructions:
        return f"{instructions}{SYSTEM_SEPARATOR}{directive}"
    return directive


def plan_structured_output(
    schema: SchemaDescriptor[Any],
    capabilities: CapabilityRecord,
    instructions: str | None = None,
) -> StructuredPlan:
    """Choose and build the strategy for *capabilities*."""
    mode = capabilities.structured_mode
    logger.debug("Structured output for %s uses %s mode", capabilities.provider, mode)

    if mode == "native":
        return StructuredPlan(
            mode=mode,
            fields=_native_fields(capabilities.native_schema_style, schema.json_schema),
            instructions=instructions,
        )
    if mode == "tool":
        return StructuredPlan(
            mode=mode,
            fields=_forced_tool_fields(schema.json_schema),
            instructions=instructions,
        )

    fields: dict[str, Any] = {}
    if capabilities.supports_json_object:
        fields["response_format"] = {"type": "json_object"}
    return StructuredPlan(
        mode=mode,
        fields=fields,
        instructions=schema_instructions(schema.json_schema, instructions),
    )


def strip_reasoning(text: str, markup: tuple[str, str] | None) -> str:
    """Remove a leading inline reasoning block delimited by *markup*.

    The block ends at the first closing marker after the opening one, so an
    answer that mentions the marker itself survives. An opened block that
    never closes leaves no answer behind.
    """
    if markup is None:
        return text
    start, end = markup
    body = text.lstrip()
    if not body.startswith(start):
        return text
    close_at = body.find(end, len(start))
    if close_at == -1:
        return ""
    return body[close_at + len(end) :].lstrip()


def extract_raw(response: ProviderResponse, mode: StructuredMode) -> str | None:
    """Return the raw JSON text: tool arguments in tool mode, text otherwise."""
    if mode == "tool":
        for call in response.tool_calls:
            if call.name == JSON_TOOL_NAME:
                return call.arguments
        return None
    return response.text


def parse_structured(
    response: ProviderResponse,
    schema: SchemaDescriptor[Any],
    plan: StructuredPlan,
    capabilities: CapabilityRecord,
) -> Any:
    """Extract, strip, parse and validate a structured answer.

    Raises:
        EmptyResponseError: Nothing usable came back.
        MalformedJSONError: Content is not JSON.
        SchemaViolationError: JSON does not satisfy the schema.
    """
    raw = extract_raw(response, plan.mode)
    if raw is None:
        raise EmptyResponseError(
            "No tool use response received"
            if plan.mode == "tool"
            else "No response content received",
        )

    content = strip_reasoning(raw, capabilities.reasoning_markup).strip()
    if not content:
        raise EmptyResponseError("No response content received")

    try:
        value = json.loads(content)
    except (json.JSONDecodeError, RecursionError) as e:
        # Pathologically nested arrays exhaust the decoder's stack.
        raise MalformedJSONError(
            f"Failed to parse JSON: {e}",
            raw=content,
            hint="The model answered with prose; try a lower temperature.",
        ) from e

    return schema.validate(value)
