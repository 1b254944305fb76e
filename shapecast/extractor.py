"""
SHAPECAST Extraction - Free Text to Validated JSON

Overview:
---------
Turns free-form text into data matching a caller-supplied shape.  Each
*attempt* sends the fixed prompt context plus the real content to the
generation collaborator, parses the reply as JSON and runs it through the
:class:`~shapecast.schemas.shape_compiler.ShapeValidator` built for the
request.

Retry Policy:
-------------
- Attempts run strictly one after another; none overlap.
- A transport error, unparseable output and a validation mismatch are all
  the same retryable failure.
- With a budget of ``N`` retries there are at most ``N + 1`` attempts.
- Failures are logged, never returned.  Exhausting the budget raises
  :class:`RetryBudgetExhausted` with a generic message.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from .generation import TextGenerator
from .prompting import build_messages
from .schemas.shape_compiler import ShapeValidator
from .utils.logging import (
    get_logger,
    log_attempt_failure,
    log_llm_response,
    log_prompt,
    log_schema_info,
)

__all__ = [
    "DEFAULT_RETRIES",
    "ExtractionError",
    "OutputParseError",
    "RetryBudgetExhausted",
    "Success",
    "Failure",
    "Outcome",
    "retry",
    "parse_model_output",
    "extract",
]

_logger = get_logger(__name__)

DEFAULT_RETRIES = 3

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)


class ExtractionError(Exception):
    """Base class for extraction errors."""


class OutputParseError(ExtractionError):
    """The model's reply is not valid JSON."""


class RetryBudgetExhausted(ExtractionError):
    """Every attempt failed; the caller gets no partial result."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Extraction failed after {attempts} attempts")


# ---------------------------------------------------------------------------
# Outcome types and retry helper
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E
    attempts: int


Outcome = Union[Success[T], Failure[Exception]]


async def retry(
    retries: int,
    attempt: Callable[[], Awaitable[T]],
    *,
    on_failure: Optional[Callable[[Exception, int, int], None]] = None,
) -> Outcome[T]:
    """Run *attempt* until it succeeds or ``retries + 1`` attempts have failed.

    ``on_failure(error, attempt_number, remaining)`` is called after every
    failed attempt, including the last one (with ``remaining == 0``).
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")

    remaining = retries
    attempt_number = 0
    while True:
        attempt_number += 1
        try:
            return Success(await attempt())
        except Exception as exc:
            if on_failure is not None:
                on_failure(exc, attempt_number, remaining)
            if remaining == 0:
                return Failure(exc, attempt_number)
            remaining -= 1


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity/-Infinity; JSON does not
    raise OutputParseError(f"Model returned non-JSON constant {name}")


def parse_model_output(text: Optional[str]) -> Any:
    """Parse the model's reply as JSON, tolerating a surrounding code fence."""
    if not text or not text.strip():
        raise OutputParseError("Model returned an empty response")
    cleaned = text.strip()
    m = _FENCE_RE.match(cleaned)
    if m:
        cleaned = m.group(1).strip()
    try:
        return json.loads(cleaned, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise OutputParseError(f"Model returned invalid JSON: {exc}") from exc


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


async def extract(
    raw_text: str,
    validator: ShapeValidator,
    shape_for_prompt: Any,
    retries: int = DEFAULT_RETRIES,
    *,
    generator: TextGenerator,
) -> Any:
    """Extract data shaped like *shape_for_prompt* from *raw_text*.

    Parameters
    ----------
    raw_text:
        Free-form source text.
    validator:
        Validator synthesized from the same shape; owned by this call.
    shape_for_prompt:
        The shape description, rendered into the prompt as JSON.
    retries:
        Additional attempts allowed after the first failure.
    generator:
        The text-generation collaborator; called exactly once per attempt.

    Returns
    -------
    Any
        The first model output that parses and validates.

    Raises
    ------
    RetryBudgetExhausted
        After ``retries + 1`` failed attempts.
    """
    start_time = time.time()
    _logger.info(
        f"EXTRACTION START | kind={validator.kind} | text={len(raw_text)} chars | retries={retries}"
    )

    log_schema_info(_logger, validator.kind, json.dumps(shape_for_prompt, indent=2, default=str))

    async def attempt() -> Any:
        messages = build_messages(raw_text, shape_for_prompt)
        log_prompt(_logger, "Content Turn", messages[-1]["content"])
        reply = await generator.generate(messages)
        log_llm_response(_logger, "Raw Response", reply or "")
        return validator.validate(parse_model_output(reply))

    def on_failure(error: Exception, attempt_number: int, remaining: int) -> None:
        log_attempt_failure(_logger, attempt_number, error, remaining)

    outcome = await retry(retries, attempt, on_failure=on_failure)
    duration = time.time() - start_time

    if isinstance(outcome, Failure):
        _logger.info(f"EXTRACTION FAILED | attempts={outcome.attempts} | {duration:.2f}s")
        raise RetryBudgetExhausted(outcome.attempts) from outcome.error

    _logger.info(f"EXTRACTION COMPLETE | {duration:.2f}s")
    return outcome.value
