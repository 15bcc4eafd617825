"""Backoff policy — a pure function of (attempt, outcome) → next action.

No I/O or clocks here; RetryingRequestClient performs the call and the sleep.
"""
from dataclasses import dataclass

from image_ask.errors import ClientError, NetworkError, RequestFailure, ServerError


@dataclass(frozen=True)
class RequestAttemptState:
    index: int
    max_attempts: int
    base_delay_ms: int

    @classmethod
    def first(cls, max_attempts: int, base_delay_ms: int) -> "RequestAttemptState":
        match (max_attempts, base_delay_ms):
            case (n, _) if n < 1:
                raise ValueError("max_attempts must be at least 1")
            case (_, d) if d < 0:
                raise ValueError("base_delay_ms must not be negative")
            case _:
                return cls(index=0, max_attempts=max_attempts, base_delay_ms=base_delay_ms)

    @property
    def number(self) -> int:
        """1-based attempt number, for logs."""
        return self.index + 1

    @property
    def is_last(self) -> bool:
        return self.index >= self.max_attempts - 1

    @property
    def delay_ms(self) -> int:
        return self.base_delay_ms * 2**self.index

    def next(self) -> "RequestAttemptState":
        return RequestAttemptState(self.index + 1, self.max_attempts, self.base_delay_ms)


@dataclass(frozen=True)
class Succeed:
    pass


@dataclass(frozen=True)
class Fail:
    error: RequestFailure


@dataclass(frozen=True)
class Wait:
    delay_ms: int


Decision = Succeed | Fail | Wait


def is_success(status: int) -> bool:
    return 200 <= status < 300


def is_client_error(status: int) -> bool:
    return 400 <= status < 500


def decide(attempt: RequestAttemptState, outcome: int | Exception) -> Decision:
    """Classify one attempt's outcome: an HTTP status or the transport exception.

    Network failures retry exactly like 5xx responses; 4xx never retries.
    """
    match outcome:
        case int() as status if is_success(status):
            return Succeed()
        case int() as status if is_client_error(status):
            return Fail(ClientError(status))
        case int() if attempt.is_last:
            return Fail(ServerError(attempt.max_attempts))
        case Exception() as exc if attempt.is_last:
            return Fail(NetworkError(str(exc) or type(exc).__name__))
        case _:
            return Wait(attempt.delay_ms)
