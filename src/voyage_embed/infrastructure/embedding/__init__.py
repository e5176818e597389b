"""
Embedding API client module for voyage-embed.

Provides an async HTTP client for the VoyageAI embeddings endpoint with
linear backoff retry and dual-format (float array / base64) decoding.
"""

from .client import VoyageAIApiClient
from .errors import (
    DecodingError,
    DeserializationError,
    EmbeddingClientError,
    InvalidArgumentError,
    TransportError,
)
from .interface import EmbeddingApiClientInterface
from .models import (
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    ErrorResponse,
    UsageInfo,
)
from .response_parser import (
    NumericArray,
    PackedBase64,
    classify_payload,
    decode_embedding,
    decode_payload,
)
from .retry import RETRYABLE_STATUS_CODES, RetryConfig, RetryState

__all__ = [
    "EmbeddingApiClientInterface",
    "VoyageAIApiClient",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "EmbeddingData",
    "UsageInfo",
    "ErrorResponse",
    "NumericArray",
    "PackedBase64",
    "classify_payload",
    "decode_payload",
    "decode_embedding",
    "EmbeddingClientError",
    "InvalidArgumentError",
    "TransportError",
    "DeserializationError",
    "DecodingError",
    "RetryConfig",
    "RetryState",
    "RETRYABLE_STATUS_CODES",
]
