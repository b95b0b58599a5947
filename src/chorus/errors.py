"""Exception hierarchy for Chorus."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterator


class ChorusError(Exception):
    """Base exception for all Chorus errors."""

    #: Failure kind reported when this error travels through a ``Failure``.
    failure_kind: ClassVar[str] = "transport"

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ChorusError):
    """Client or request configuration is invalid.

    Raised eagerly, before any network call is made.
    """


class APIError(ChorusError):
    """Provider call failed (network, auth, rate limit, server error).

    Chorus never retries; the metadata is attached so callers can.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class EmptyResponseError(ChorusError):
    """The provider answered but returned no usable content."""

    failure_kind: ClassVar[str] = "empty_response"


class MalformedJSONError(ChorusError):
    """Content was present but could not be parsed as JSON."""

    failure_kind: ClassVar[str] = "malformed_json"

    def __init__(
        self, message: str, *, raw: str | None = None, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.raw = raw


class SchemaViolationError(ChorusError):
    """Parsed JSON did not satisfy the requested schema."""

    failure_kind: ClassVar[str] = "schema_violation"

    def __init__(
        self,
        message: str,
        *,
        errors: list[Any] | None = None,
        value: Any = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.errors = errors or []
        self.value = value


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, skipping cycles."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
