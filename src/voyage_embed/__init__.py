"""
voyage-embed - VoyageAI embedding generator for vector-search pipelines.
"""

from voyage_embed.core.config import EmbeddingOptions, VoyageConfig, load_config
from voyage_embed.infrastructure.embedding import (
    DecodingError,
    DeserializationError,
    EmbeddingClientError,
    InvalidArgumentError,
    TransportError,
    VoyageAIApiClient,
)
from voyage_embed.services.embedding_generator import (
    Embedding,
    GeneratedEmbeddings,
    UsageDetails,
    VoyageAIEmbeddingGenerator,
)

__version__ = "0.1.0"

__all__ = [
    "EmbeddingOptions",
    "VoyageConfig",
    "load_config",
    "VoyageAIApiClient",
    "VoyageAIEmbeddingGenerator",
    "Embedding",
    "GeneratedEmbeddings",
    "UsageDetails",
    "EmbeddingClientError",
    "InvalidArgumentError",
    "TransportError",
    "DeserializationError",
    "DecodingError",
]
