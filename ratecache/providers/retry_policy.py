"""Retry and plan-fallback state machine for upstream rate requests.

The provider moves through two request modes. ``FULL`` sends the requested
base currency; ``RESTRICTED`` omits it because the access key's plan does not
allow choosing a base. ``next_step`` is a pure function from the current
state and the category of the last failure to what should happen next, so the
whole protocol can be exercised without any I/O.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum

RATE_LIMIT_CODE = 104
BASE_CURRENCY_RESTRICTED_CODE = 105

# Rejections that will fail the same way no matter how often they are repeated.
FATAL_ERROR_CODES = frozenset(
    {
        101,  # missing or invalid access key
        102,  # inactive account
        103,  # unknown endpoint
        106,  # no rates for the query
        201,  # invalid base currency
        202,  # invalid symbols
        301,  # missing date
        302,  # invalid date
    }
)

TOO_MANY_REQUESTS = 429


class RequestMode(str, Enum):
    FULL = "full"
    RESTRICTED = "restricted"


class ErrorCategory(str, Enum):
    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    PLAN_RESTRICTED = "plan_restricted"
    FATAL = "fatal"


class Action(str, Enum):
    RETRY = "retry"
    SWITCH_MODE = "switch_mode"
    EXHAUSTED = "exhausted"
    ABORT = "abort"


@dataclass(frozen=True)
class RetryState:
    mode: RequestMode = RequestMode.FULL
    retries_used: int = 0
    switched: bool = False


@dataclass(frozen=True)
class RetryDecision:
    action: Action
    state: RetryState

    @property
    def should_retry(self) -> bool:
        return self.action in (Action.RETRY, Action.SWITCH_MODE)

    @property
    def needs_backoff(self) -> bool:
        return self.action is Action.RETRY


def categorize(
    *,
    status_code: int | None = None,
    error_code: int | None = None,
    network_error: bool = False,
) -> ErrorCategory:
    """Map an upstream failure to the category driving the retry decision."""

    if error_code == BASE_CURRENCY_RESTRICTED_CODE:
        return ErrorCategory.PLAN_RESTRICTED
    if error_code == RATE_LIMIT_CODE or status_code == TOO_MANY_REQUESTS:
        return ErrorCategory.RATE_LIMITED
    if network_error:
        return ErrorCategory.TRANSIENT
    if error_code in FATAL_ERROR_CODES:
        return ErrorCategory.FATAL
    if status_code is not None and 400 <= status_code < 500:
        return ErrorCategory.FATAL
    # 5xx, and unsuccessful payloads carrying an unrecognised code.
    return ErrorCategory.TRANSIENT


def next_step(state: RetryState, category: ErrorCategory, max_retries: int) -> RetryDecision:
    """Decide the follow-up to a failed attempt.

    The switch to restricted mode happens at most once per call and does not
    consume a retry; a plan restriction reported while already in restricted
    mode cannot be recovered from.
    """

    if category is ErrorCategory.FATAL:
        return RetryDecision(Action.ABORT, state)

    if category is ErrorCategory.PLAN_RESTRICTED:
        if state.mode is RequestMode.FULL and not state.switched:
            return RetryDecision(
                Action.SWITCH_MODE,
                replace(state, mode=RequestMode.RESTRICTED, switched=True),
            )
        return RetryDecision(Action.ABORT, state)

    if state.retries_used >= max_retries:
        return RetryDecision(Action.EXHAUSTED, state)
    return RetryDecision(Action.RETRY, replace(state, retries_used=state.retries_used + 1))


@dataclass(frozen=True)
class ExponentialBackoff:
    """Delay schedule ``initial * multiplier ** (n - 1)``, capped and jittered."""

    initial: float = 0.5
    multiplier: float = 1.5
    max_delay: float = 15.0
    jitter: float = 0.0

    def delay(self, retry_number: int) -> float:
        if retry_number < 1:
            return 0.0
        base = min(self.initial * (self.multiplier ** (retry_number - 1)), self.max_delay)
        if self.jitter:
            base += random.uniform(-self.jitter, self.jitter)
        return max(base, 0.0)
