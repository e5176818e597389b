"""
Centralized services container module for voyage-embed.

Wires configuration, the API client and the embedding generator together so
vector-store and search integrations can get a ready generator in one call.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from voyage_embed.core.config import (
    EmbeddingOptions,
    VoyageConfig,
    configure_logging,
    load_config,
)
from voyage_embed.infrastructure import VoyageAIApiClient
from voyage_embed.services.embedding_generator import VoyageAIEmbeddingGenerator

logger = logging.getLogger(__name__)


@dataclass
class ServicesContainer:
    """
    Container holding the shared service instances.

    Attributes:
        config: Application configuration
        api_client: Client for the embeddings endpoint
        embedding_generator: Generator built on api_client
    """

    config: VoyageConfig
    api_client: VoyageAIApiClient
    embedding_generator: VoyageAIEmbeddingGenerator

    async def close(self) -> None:
        """Release the HTTP connections held by the API client."""
        await self.api_client.close()


def create_embedding_generator(
    options: EmbeddingOptions,
    http_client: Optional[httpx.AsyncClient] = None,
) -> VoyageAIEmbeddingGenerator:
    """
    Factory function to create an embedding generator from options.

    Args:
        options: Shared embedding options; api_key must be set
        http_client: Optional preconfigured HTTP client

    Returns:
        Generator that owns its API client

    Raises:
        ValueError: If the API key is missing
    """
    api_client = VoyageAIApiClient(options, http_client=http_client)
    return VoyageAIEmbeddingGenerator(api_client, options, owns_client=True)


def create_services(
    config_path: Optional[Path | str] = None,
    setup_logging: bool = True,
) -> ServicesContainer:
    """
    Create and initialize all services.

    Loads configuration from the optional file, .env and environment
    variables, applies the logging settings and builds the generator.

    Args:
        config_path: Optional path to configuration file. If None, uses
                    environment variables and defaults.
        setup_logging: Whether to apply config.logging to the package logger.

    Returns:
        ServicesContainer with all initialized services.

    Raises:
        ValueError: If required configuration is missing (e.g., API key).
    """
    config = load_config(config_path)

    if setup_logging:
        configure_logging(config.logging)

    api_client = VoyageAIApiClient(config.embedding)
    embedding_generator = VoyageAIEmbeddingGenerator(api_client, config.embedding)

    logger.info(
        f"Embedding generator ready (model={config.embedding.model}, "
        f"base_url={config.embedding.base_url})"
    )

    return ServicesContainer(
        config=config,
        api_client=api_client,
        embedding_generator=embedding_generator,
    )
