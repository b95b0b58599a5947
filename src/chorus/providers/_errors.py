"""Translate provider SDK exceptions into ``APIError``.

Each SDK raises its own exception family, and each tucks the HTTP status
and the suggested back-off somewhere different. The helpers here look in
all of those places so every adapter reports failures the same way.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from chorus.config import API_KEY_ENV_VARS
from chorus.errors import APIError, RateLimitError, _walk_exception_chain

# Statuses worth another attempt: timeouts, conflicts, throttling, 5xx.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

_TRANSIENT_TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.RequestError)


def _http_status(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and 100 <= value < 600:
        return value
    return None


def _status_candidates(exc: BaseException) -> list[Any]:
    # openai/anthropic/groq put it on the error, httpx and gemini on .response,
    # mistral on .raw_response.
    response = getattr(exc, "response", None)
    raw_response = getattr(exc, "raw_response", None)
    return [
        getattr(exc, "status_code", None),
        getattr(exc, "status", None),
        getattr(exc, "code", None),
        getattr(response, "status_code", None),
        getattr(raw_response, "status_code", None),
    ]


def extract_status_code(exc: BaseException) -> int | None:
    """First HTTP status found anywhere in the exception chain."""
    for link in _walk_exception_chain(exc):
        for candidate in _status_candidates(link):
            status = _http_status(candidate)
            if status is not None:
                return status
    return None


def _seconds(raw: Any) -> float | None:
    """Non-negative delay from a number, ``"2"`` or a protobuf ``"8s"``."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if raw >= 0 else None
    if not isinstance(raw, str):
        return None
    text = raw.strip().removesuffix("s")
    try:
        value = float(text)
    except ValueError:
        # HTTP-date Retry-After values are not interpreted.
        return None
    return value if value >= 0 else None


def _header_delay(exc: BaseException) -> float | None:
    headers = getattr(getattr(exc, "response", None), "headers", None)
    lookup = getattr(headers, "get", None)
    if not callable(lookup):
        return None
    return _seconds(lookup("Retry-After"))


def _retry_info_delay(exc: BaseException) -> float | None:
    """Delay from a ``google.rpc.RetryInfo`` entry in a Gemini error body.

    ``google.genai`` errors expose the decoded body as ``.details``::

        {"error": {"details": [{"@type": "...RetryInfo", "retryDelay": "8s"}]}}
    """
    details = getattr(exc, "details", None)
    body = details.get("error") if isinstance(details, dict) else None
    entries = body.get("details") if isinstance(body, dict) else None
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if "RetryInfo" not in str(entry.get("@type", "")):
            continue
        delay = _seconds(entry.get("retryDelay"))
        if delay is not None:
            return delay
    return None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Suggested back-off in seconds, if any link of the chain carries one."""
    for link in _walk_exception_chain(exc):
        for delay in (
            _seconds(getattr(link, "retry_after", None)),
            _header_delay(link),
            _retry_info_delay(link),
        ):
            if delay is not None:
                return delay
    return None


def _is_retryable(
    exc: BaseException, status_code: int | None, retry_after_s: float | None
) -> bool:
    if retry_after_s is not None or status_code in RETRYABLE_STATUS_CODES:
        return True
    return any(
        isinstance(link, _TRANSIENT_TRANSPORT_ERRORS)
        for link in _walk_exception_chain(exc)
    )


def _auth_hint(provider: str, status_code: int | None, detail: str) -> str | None:
    """Point at the key variables when the failure looks like bad credentials."""
    detail = detail.lower()
    mentions_key = "api key" in detail or "api_key" in detail
    if status_code not in {401, 403} and not (status_code == 400 and mentions_key):
        return None
    names = API_KEY_ENV_VARS.get(provider)
    env_vars = " or ".join(names) if names else "the provider API key"
    return f"Check credentials/permissions (set {env_vars} or pass api_key=...)."


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
    hint: str | None = None,
) -> APIError:
    """Return an ``APIError`` describing *exc* with retry metadata attached.

    An ``APIError`` passed in is returned as is, with only its missing
    provider, phase and hint filled. ``asyncio.CancelledError`` propagates.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, APIError):
        exc.provider = exc.provider or provider
        exc.phase = exc.phase or phase
        exc.hint = exc.hint or hint
        return exc

    status_code = extract_status_code(exc)
    retry_after_s = extract_retry_after_s(exc)

    summary = message or f"{provider} {phase} failed"
    if status_code is not None:
        summary = f"{summary} (status={status_code})"
    detail = str(exc)

    error_type = RateLimitError if status_code == 429 else APIError
    return error_type(
        f"{summary}: {detail}" if detail else summary,
        hint=hint if hint is not None else _auth_hint(provider, status_code, detail),
        retryable=_is_retryable(exc, status_code, retry_after_s),
        status_code=status_code,
        retry_after_s=retry_after_s,
        provider=provider,
        phase=phase,
    )
