"""Resilient Anthropic Client — chat completions for the assistant, with bounded retries.

Invariants:
    - 429 and transient failures (5xx, 529 overloaded, connection) are retried at most
      max_retries times; the last failure becomes an ExternalServiceError
    - A Retry-After header on a 429 overrides the computed backoff
    - Timeouts and other 4xx responses fail on the first attempt
    - Nothing from the SDK escapes: every failure is an ExternalServiceError (503)

Design Decisions:
    - Failure classification is one pure function (_classify) so the retry loop stays flat
    - Backoff is exponential from base_delay_ms, capped at max_delay_ms, with ±25% jitter
"""

import asyncio
import logging
import random
from dataclasses import dataclass

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from app.config import Settings
from app.core.errors import ErrorContext, ExternalServiceError

logger = logging.getLogger(__name__)

# HTTP 529 has no dedicated exception class in older SDK releases.
_OVERLOADED_STATUS = 529


@dataclass(frozen=True)
class _Failure:
    kind: str
    retryable: bool
    retry_after_ms: int | None = None


def _retry_after_ms(error: APIError) -> int | None:
    response = getattr(error, "response", None)
    if response is None:
        return None
    value = response.headers.get("retry-after")
    if value and value.isdigit():
        return int(value) * 1000
    return None


def _classify(error: APIError) -> _Failure:
    if isinstance(error, RateLimitError):
        return _Failure("rate_limit", True, _retry_after_ms(error))
    if isinstance(error, APITimeoutError):
        return _Failure("timeout", False)
    if isinstance(error, (APIConnectionError, InternalServerError)):
        return _Failure("connection_error", True)
    if isinstance(error, APIStatusError) and error.status_code == _OVERLOADED_STATUS:
        return _Failure("overloaded", True)
    return _Failure("client_error", False)


class ResilientAnthropicClient:
    """AsyncAnthropic plus the retry policy used by the assistant."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResilientAnthropicClient":
        return cls(
            api_key=settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=messages,
                )
            except APIError as e:
                failure = _classify(e)
                if not failure.retryable or attempt >= self.max_retries:
                    raise self._give_up(e, failure, attempt, context) from e
                delay = failure.retry_after_ms or self.backoff_ms(attempt)
                logger.warning(
                    f"Assistant call failed ({failure.kind}), retrying in {delay}ms",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
                attempt += 1
                continue

            usage = response.usage
            logger.info(
                "Assistant completion received",
                extra={
                    "attempt": attempt + 1,
                    "counts": {
                        "input_tokens": usage.input_tokens,
                        "output_tokens": usage.output_tokens,
                    },
                },
            )
            return response

    def backoff_ms(self, attempt: int) -> int:
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _give_up(
        self,
        error: APIError,
        failure: _Failure,
        attempt: int,
        context: ErrorContext | None,
    ) -> ExternalServiceError:
        message = str(error)
        if failure.retryable:
            message = f"still failing after {attempt} retries: {error}"
        return ExternalServiceError(
            message,
            failure.kind,
            retry_after_ms=failure.retry_after_ms,
            context=context,
        )
