"""Tier failures, error classification and the retry/advance transition table."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

from unisvg.errors import UnisvgError


class TierFailure(UnisvgError):
    """One generation attempt failed."""

    def __init__(self, message: str, tier: str = ""):
        super().__init__(message)
        self.tier = tier


class TierTimeout(TierFailure):
    """An attempt did not finish within its time budget."""


class ErrorClass(str, Enum):
    API_ERROR = "api_error"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    JSON_PARSE = "json_parse"
    VALIDATION = "validation"
    COORDINATE = "coordinate"
    LAYOUT = "layout"
    NETWORK = "network"
    UNKNOWN = "unknown"


class Transition(str, Enum):
    RETRY = "retry"      # same tier again after backoff, while attempts remain
    ADVANCE = "advance"  # give up on this tier immediately


TRANSITIONS: dict[ErrorClass, Transition] = {
    ErrorClass.TIMEOUT: Transition.RETRY,
    ErrorClass.RATE_LIMIT: Transition.RETRY,
    ErrorClass.NETWORK: Transition.RETRY,
    ErrorClass.UNKNOWN: Transition.RETRY,
    ErrorClass.API_ERROR: Transition.ADVANCE,
    ErrorClass.JSON_PARSE: Transition.ADVANCE,
    ErrorClass.VALIDATION: Transition.ADVANCE,
    ErrorClass.COORDINATE: Transition.ADVANCE,
    ErrorClass.LAYOUT: Transition.ADVANCE,
}

SUGGESTED_ACTIONS: dict[ErrorClass, str] = {
    ErrorClass.TIMEOUT: "Increase timeout or simplify prompt",
    ErrorClass.RATE_LIMIT: "Wait and retry, or upgrade API plan",
    ErrorClass.API_ERROR: "Check API key and service status",
    ErrorClass.JSON_PARSE: "Improve prompt clarity or use fallback",
    ErrorClass.VALIDATION: "Check schema compatibility",
    ErrorClass.COORDINATE: "Validate coordinate bounds",
    ErrorClass.LAYOUT: "Check region and anchor specifications",
    ErrorClass.NETWORK: "Check network connectivity",
    ErrorClass.UNKNOWN: "Try fallback generation method",
}

# Checked in order; first keyword hit wins
_KEYWORD_RULES: tuple[tuple[tuple[str, ...], ErrorClass], ...] = (
    (("timeout", "timed out"), ErrorClass.TIMEOUT),
    (("rate limit", "429"), ErrorClass.RATE_LIMIT),
    (("api", "openai", "anthropic"), ErrorClass.API_ERROR),
    (("json", "parse"), ErrorClass.JSON_PARSE),
    (("validation", "schema"), ErrorClass.VALIDATION),
    (("coordinate", "bounds"), ErrorClass.COORDINATE),
    (("layout", "region"), ErrorClass.LAYOUT),
    (("network", "connection"), ErrorClass.NETWORK),
)


def classify_error(error: BaseException) -> ErrorClass:
    if isinstance(error, (TierTimeout, TimeoutError)):
        return ErrorClass.TIMEOUT
    message = str(error).lower()
    for keywords, error_class in _KEYWORD_RULES:
        if any(keyword in message for keyword in keywords):
            return error_class
    return ErrorClass.UNKNOWN


def is_recoverable(error_class: ErrorClass) -> bool:
    return TRANSITIONS[error_class] is Transition.RETRY


@dataclass(frozen=True)
class ClassifiedError:
    error_class: ErrorClass
    message: str
    tier: str
    attempt: int
    timestamp: float = field(default_factory=time.time)

    @property
    def recoverable(self) -> bool:
        return is_recoverable(self.error_class)

    @property
    def suggested_action(self) -> str:
        return SUGGESTED_ACTIONS[self.error_class]

    @classmethod
    def from_exception(cls, error: BaseException, tier: str, attempt: int) -> ClassifiedError:
        message = str(error) or type(error).__name__
        return cls(classify_error(error), message, tier, attempt)

    def summary(self) -> str:
        return f"{self.error_class.value}: {self.message} (attempt {self.attempt})"

    def to_dict(self) -> dict:
        return {
            "type": self.error_class.value,
            "message": self.message,
            "tier": self.tier,
            "attempt": self.attempt,
            "timestamp": self.timestamp,
            "recoverable": self.recoverable,
            "suggested_action": self.suggested_action,
        }
