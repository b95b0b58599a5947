"""Uniform result values returned by the client façade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, NoReturn, TypeVar, Union

from chorus.errors import ChorusError

FailureKind = Literal[
    "transport", "empty_response", "malformed_json", "schema_violation"
]

T = TypeVar("T")


@dataclass(frozen=True)
class Failure:
    """A provider-side failure returned instead of raised.

    ``ask()`` and ``ask_json()`` hand these back so callers can branch on
    ``isinstance(result, Failure)`` without exception handling. The original
    error is kept on ``error`` for inspection or re-raising.
    """

    kind: FailureKind
    message: str
    error: ChorusError

    @classmethod
    def from_error(cls, error: ChorusError) -> Failure:
        """Build a Failure whose kind follows the error class."""
        kind: Any = error.failure_kind
        return cls(kind=kind, message=str(error), error=error)

    @property
    def hint(self) -> str | None:
        """Actionable hint carried by the underlying error, if any."""
        return self.error.hint

    def raise_(self) -> NoReturn:
        """Re-raise the underlying error."""
        raise self.error

    def __str__(self) -> str:
        """Return ``kind: message``."""
        return f"{self.kind}: {self.message}"


#: Return type of ``ask()``.
TextResult = Union[str, Failure]
#: Return type of ``ask_json()`` for a schema producing ``T``.
StructuredResult = Union[T, Failure]
