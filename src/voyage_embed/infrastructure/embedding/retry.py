"""Retry policy for the VoyageAI API client."""

from dataclasses import dataclass
from enum import Enum

from voyage_embed.core.config import EmbeddingOptions

# Rate limiting and transient server-side failures
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class RetryState(Enum):
    """States of a single create-embeddings call."""

    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED_FAILED = "exhausted_failed"
    FATAL_FAILED = "fatal_failed"


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Retries allowed after the first attempt; a call makes at
            most max_retries + 1 attempts.
        retry_delay_ms: Base delay in milliseconds. Backoff is linear: the
            n-th retry waits retry_delay_ms * n.
    """

    max_retries: int = 3
    retry_delay_ms: int = 1000

    @classmethod
    def from_options(cls, options: EmbeddingOptions) -> "RetryConfig":
        return cls(max_retries=options.max_retries, retry_delay_ms=options.retry_delay_ms)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt_number: int) -> float:
        """Seconds to wait before retry number attempt_number (1-based)."""
        return self.retry_delay_ms * attempt_number / 1000.0

    def can_retry(self, attempts_made: int) -> bool:
        return attempts_made <= self.max_retries


def is_retryable_status(status_code: int) -> bool:
    """Check whether an HTTP status is worth another attempt."""
    return status_code in RETRYABLE_STATUS_CODES
