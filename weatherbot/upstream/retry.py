"""
Retry state machine for upstream fetches.

A fetch starts in Attempting(1). Each attempt produces an AttemptOutcome and
advance() maps (state, outcome) to the next state:

    Attempting(n) --ok-------------------------> Succeeded
    Attempting(n) --failure, n < max_attempts--> Attempting(n + 1)
    Attempting(n) --failure, n == max_attempts-> Failed

The transition function does no I/O; the client owns the waiting.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from .models import FetchError, FetchErrorKind

HTTP_OK = 200


@dataclass(frozen=True)
class AttemptOutcome:
    """
    Result of a single HTTP attempt.

    status is None when no response was received at all. error holds the
    transport or decode exception, payload the decoded body on success.
    """
    status: Optional[int] = None
    payload: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status == HTTP_OK and self.error is None

    def classify(self) -> FetchErrorKind:
        """Failure category of this attempt. Only meaningful when not succeeded."""
        if self.status is None:
            return FetchErrorKind.UNAVAILABLE
        if self.status != HTTP_OK:
            return FetchErrorKind.UPSTREAM_STATUS
        return FetchErrorKind.DECODE_FAILURE

    def describe(self) -> str:
        status = "none" if self.status is None else str(self.status)
        return f"err={self.error!r}, status={status}"


@dataclass(frozen=True)
class Attempting:
    attempt: int


@dataclass(frozen=True)
class Succeeded:
    payload: Any


@dataclass(frozen=True)
class Failed:
    error: FetchError


RetryState = Union[Attempting, Succeeded, Failed]


def advance(state: Attempting, outcome: AttemptOutcome, max_attempts: int) -> RetryState:
    """Next state after the attempt numbered state.attempt finished with outcome."""
    if outcome.succeeded:
        return Succeeded(outcome.payload)

    if state.attempt < max_attempts:
        return Attempting(state.attempt + 1)

    kind = outcome.classify()
    return Failed(FetchError(
        kind=kind,
        attempts=state.attempt,
        status=outcome.status if kind == FetchErrorKind.UPSTREAM_STATUS else None,
        detail=str(outcome.error) if outcome.error is not None else "",
    ))
