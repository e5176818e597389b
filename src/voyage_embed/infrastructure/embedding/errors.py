"""Exception types for the VoyageAI embedding client."""

from typing import Optional


class EmbeddingClientError(Exception):
    """Base exception for embedding client errors."""

    pass


class InvalidArgumentError(EmbeddingClientError, ValueError):
    """Bad caller input (missing request, missing or empty text). Never retried."""

    pass


class TransportError(EmbeddingClientError):
    """The API answered with a non-success status.

    Raised immediately for non-retryable statuses and after the last attempt
    for retryable ones.

    Attributes:
        status_code: HTTP status code of the final response
        detail: Error detail from the response body, or the raw body, or the
            reason phrase
        url: URL of the failed request
    """

    def __init__(self, status_code: int, detail: str, url: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(
            f"VoyageAI API request failed with status code {status_code}: {detail}. "
            f"Request URL: {url or 'Unknown URL'}"
        )


class DeserializationError(EmbeddingClientError):
    """A success response body was empty or not a valid embedding response."""

    pass


class DecodingError(EmbeddingClientError):
    """An embedding payload could not be decoded into float32 values."""

    pass
