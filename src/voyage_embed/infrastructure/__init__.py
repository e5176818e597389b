"""
Infrastructure Layer - VoyageAI embeddings API client and test fakes.
"""

from voyage_embed.infrastructure.embedding import (
    DecodingError,
    DeserializationError,
    EmbeddingApiClientInterface,
    EmbeddingClientError,
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    InvalidArgumentError,
    RetryConfig,
    RetryState,
    TransportError,
    UsageInfo,
    VoyageAIApiClient,
    decode_embedding,
)
from voyage_embed.infrastructure.fakes import FakeVoyageAIApiClient

__all__ = [
    # API client
    "EmbeddingApiClientInterface",
    "VoyageAIApiClient",
    "RetryConfig",
    "RetryState",
    # Wire models
    "EmbeddingRequest",
    "EmbeddingResponse",
    "EmbeddingData",
    "UsageInfo",
    "decode_embedding",
    # Errors
    "EmbeddingClientError",
    "InvalidArgumentError",
    "TransportError",
    "DeserializationError",
    "DecodingError",
    # Fakes for testing
    "FakeVoyageAIApiClient",
]
