"""
Core Layer - Configuration and logging setup.
"""

from voyage_embed.core.config import (
    EmbeddingOptions,
    LoggingConfig,
    VoyageConfig,
    configure_logging,
    load_config,
)

__all__ = [
    "EmbeddingOptions",
    "LoggingConfig",
    "VoyageConfig",
    "configure_logging",
    "load_config",
]
