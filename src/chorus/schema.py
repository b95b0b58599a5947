"""Schema descriptors: conversion to JSON Schema and validation of answers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import BaseModel, ValidationError

from chorus.errors import ConfigurationError, SchemaViolationError

ModelT = TypeVar("ModelT", bound=BaseModel)
#: Pydantic ``BaseModel`` subclass or JSON Schema dict.
SchemaInput = Union[type[BaseModel], dict[str, Any]]

_T = TypeVar("_T")


def _validator_class(schema: dict[str, Any]) -> Any:
    """Pick the validator for the dialect named by '$schema', 2020-12 if absent."""
    return validator_for(schema, default=Draft202012Validator)


@dataclass(frozen=True)
class SchemaDescriptor(Generic[_T]):
    """A caller schema in portable JSON Schema form, plus its validator."""

    json_schema: dict[str, Any]
    model: type[BaseModel] | None = None

    def validate(self, value: Any) -> _T:
        """Validate *value*; return the model instance or the value itself.

        Raises:
            SchemaViolationError: When *value* does not satisfy the schema.
        """
        if self.model is not None:
            try:
                return self.model.model_validate(value)  # type: ignore[return-value]
            except ValidationError as e:
                raise SchemaViolationError(
                    f"Response does not match {self.model.__name__}: "
                    f"{e.error_count()} validation error(s)",
                    errors=e.errors(include_url=False),
                    value=value,
                ) from e

        validator = _validator_class(self.json_schema)(self.json_schema)
        errors = sorted(
            validator.iter_errors(value), key=lambda e: [str(p) for p in e.path]
        )
        if errors:
            first = errors[0]
            location = "/".join(str(p) for p in first.path) or "<root>"
            raise SchemaViolationError(
                f"JSON schema validation failed at {location}: {first.message}",
                errors=[
                    {"path": list(e.path), "message": e.message} for e in errors
                ],
                value=value,
            )
        return value  # type: ignore[no-any-return]


def resolve_schema(schema: SchemaInput) -> SchemaDescriptor[Any]:
    """Turn a pydantic model class or JSON Schema dict into a descriptor.

    Raises:
        ConfigurationError: When *schema* is neither, or the dict is not a
            valid JSON Schema.
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return SchemaDescriptor(json_schema=schema.model_json_schema(), model=schema)

    if isinstance(schema, dict):
        try:
            _validator_class(schema).check_schema(schema)
        except SchemaError as e:
            raise ConfigurationError(
                f"Invalid JSON schema: {e.message}",
                hint="Pass a BaseModel subclass or a dict following JSON Schema.",
            ) from e
        return SchemaDescriptor(json_schema=schema)

    raise ConfigurationError(
        "schema must be a Pydantic model class or JSON schema dict",
        hint="Pass a BaseModel subclass or a dict following JSON Schema.",
    )
