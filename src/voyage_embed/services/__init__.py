"""
Services Layer - Embedding generator and service wiring.
"""

from voyage_embed.services.container import (
    ServicesContainer,
    create_embedding_generator,
    create_services,
)
from voyage_embed.services.embedding_generator import (
    Embedding,
    EmbeddingGeneratorInterface,
    EmbeddingGeneratorMetadata,
    GeneratedEmbeddings,
    UsageDetails,
    VoyageAIEmbeddingGenerator,
)

__all__ = [
    "EmbeddingGeneratorInterface",
    "VoyageAIEmbeddingGenerator",
    "Embedding",
    "EmbeddingGeneratorMetadata",
    "GeneratedEmbeddings",
    "UsageDetails",
    "ServicesContainer",
    "create_embedding_generator",
    "create_services",
]
