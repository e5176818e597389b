"""
Configuration module for voyage-embed.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None

SUPPORTED_INPUT_TYPES = ("query", "document")
SUPPORTED_OUTPUT_DIMENSIONS = (256, 512, 1024, 2048)
SUPPORTED_OUTPUT_DTYPES = ("float", "int8", "uint8", "binary", "ubinary")
SUPPORTED_ENCODING_FORMATS = ("base64",)


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    return section_defaults.get(key, fallback)


@dataclass(frozen=True)
class EmbeddingOptions:
    """
    Options shared by the VoyageAI API client and the embedding generator.

    Instances are immutable. Build one at startup and hand the same object
    to every component; use with_overrides() to derive a variant.

    Attributes:
        api_key: VoyageAI or MongoDB Atlas API key. Required by the API client.
        base_url: Base URL of the API. The client posts to <base_url>/embeddings.
            https://ai.mongodb.com/v1/ for MongoDB Atlas keys,
            https://api.voyageai.com/v1/ for direct VoyageAI keys.
        model: Embedding model name, e.g. voyage-4-large or voyage-code-3.
        input_type: None, "query" or "document".
        truncation: Whether the API truncates texts over the context length.
        output_dimension: None for the model default, else 256, 512, 1024 or 2048.
        output_dtype: float, int8, uint8, binary or ubinary. None omits the field.
        encoding_format: None for numeric arrays, "base64" for packed floats.
        request_timeout: Timeout in seconds for each HTTP attempt.
        max_retries: Retries after the first attempt for transient failures.
        retry_delay_ms: Base delay; the n-th retry waits retry_delay_ms * n.
    """

    api_key: str = field(
        default_factory=lambda: _get_default("embedding", "api_key", ""), repr=False
    )
    base_url: str = field(
        default_factory=lambda: _get_default(
            "embedding", "base_url", "https://ai.mongodb.com/v1/"
        )
    )
    model: str = field(
        default_factory=lambda: _get_default("embedding", "model", "voyage-4-large")
    )
    input_type: Optional[str] = field(
        default_factory=lambda: _get_default("embedding", "input_type", None)
    )
    truncation: bool = field(
        default_factory=lambda: _get_default("embedding", "truncation", True)
    )
    output_dimension: Optional[int] = field(
        default_factory=lambda: _get_default("embedding", "output_dimension", None)
    )
    output_dtype: Optional[str] = field(
        default_factory=lambda: _get_default("embedding", "output_dtype", "float")
    )
    encoding_format: Optional[str] = field(
        default_factory=lambda: _get_default("embedding", "encoding_format", None)
    )
    request_timeout: float = field(
        default_factory=lambda: _get_default("embedding", "request_timeout", 30.0)
    )
    max_retries: int = field(
        default_factory=lambda: _get_default("embedding", "max_retries", 3)
    )
    retry_delay_ms: int = field(
        default_factory=lambda: _get_default("embedding", "retry_delay_ms", 1000)
    )

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise ValueError("base_url must not be empty")
        if not self.model or not self.model.strip():
            raise ValueError("model must not be empty")
        if self.input_type is not None and self.input_type not in SUPPORTED_INPUT_TYPES:
            raise ValueError(
                f"input_type must be one of {SUPPORTED_INPUT_TYPES} or None, "
                f"got {self.input_type!r}"
            )
        if (
            self.output_dimension is not None
            and self.output_dimension not in SUPPORTED_OUTPUT_DIMENSIONS
        ):
            raise ValueError(
                f"output_dimension must be one of {SUPPORTED_OUTPUT_DIMENSIONS} or None, "
                f"got {self.output_dimension!r}"
            )
        if self.output_dtype is not None and self.output_dtype not in SUPPORTED_OUTPUT_DTYPES:
            raise ValueError(
                f"output_dtype must be one of {SUPPORTED_OUTPUT_DTYPES} or None, "
                f"got {self.output_dtype!r}"
            )
        if (
            self.encoding_format is not None
            and self.encoding_format not in SUPPORTED_ENCODING_FORMATS
        ):
            raise ValueError(
                f"encoding_format must be 'base64' or None, got {self.encoding_format!r}"
            )
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be at least 0")
        if self.retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must be at least 0")

    @property
    def embeddings_url(self) -> str:
        """Absolute URL of the embeddings endpoint."""
        return f"{self.base_url.rstrip('/')}/embeddings"

    def with_overrides(self, **changes: Any) -> "EmbeddingOptions":
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "INFO"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )


@dataclass
class VoyageConfig:
    """Main configuration class for voyage-embed."""

    embedding: EmbeddingOptions = field(default_factory=EmbeddingOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "VoyageConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            VoyageConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported or a value is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "VoyageConfig":
        """Create VoyageConfig from a dictionary."""
        config = cls()

        if "embedding" in data:
            config.embedding = _build_section(EmbeddingOptions, "embedding", data["embedding"])
        if "logging" in data:
            config.logging = _build_section(LoggingConfig, "logging", data["logging"])

        return config

    def apply_env_overrides(self) -> "VoyageConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: VOYAGE_<SECTION>_<KEY>
        Examples:
            - VOYAGE_EMBEDDING_API_KEY (or the shorthand VOYAGE_API_KEY)
            - VOYAGE_EMBEDDING_MODEL
            - VOYAGE_EMBEDDING_OUTPUT_DIMENSION
            - VOYAGE_LOGGING_LEVEL

        An empty value clears an optional field (input_type, output_dimension,
        output_dtype, encoding_format).

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Embedding options
            "VOYAGE_API_KEY": ("embedding", "api_key", str),
            "VOYAGE_EMBEDDING_API_KEY": ("embedding", "api_key", str),
            "VOYAGE_EMBEDDING_BASE_URL": ("embedding", "base_url", str),
            "VOYAGE_EMBEDDING_MODEL": ("embedding", "model", str),
            "VOYAGE_EMBEDDING_INPUT_TYPE": ("embedding", "input_type", _parse_optional_str),
            "VOYAGE_EMBEDDING_TRUNCATION": ("embedding", "truncation", _parse_bool),
            "VOYAGE_EMBEDDING_OUTPUT_DIMENSION": (
                "embedding",
                "output_dimension",
                _parse_optional_int,
            ),
            "VOYAGE_EMBEDDING_OUTPUT_DTYPE": ("embedding", "output_dtype", _parse_optional_str),
            "VOYAGE_EMBEDDING_ENCODING_FORMAT": (
                "embedding",
                "encoding_format",
                _parse_optional_str,
            ),
            "VOYAGE_EMBEDDING_REQUEST_TIMEOUT": ("embedding", "request_timeout", float),
            "VOYAGE_EMBEDDING_MAX_RETRIES": ("embedding", "max_retries", int),
            "VOYAGE_EMBEDDING_RETRY_DELAY_MS": ("embedding", "retry_delay_ms", int),
            # Logging config
            "VOYAGE_LOGGING_LEVEL": ("logging", "level", str),
            "VOYAGE_LOGGING_FORMAT": ("logging", "format", str),
        }

        embedding_changes: dict[str, Any] = {}
        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            if section == "embedding":
                embedding_changes[key] = converter(value)
            else:
                setattr(getattr(self, section), key, converter(value))

        if embedding_changes:
            self.embedding = self.embedding.with_overrides(**embedding_changes)

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _build_section(section_cls, section: str, values: Any):
    """Instantiate a config section, rejecting unknown keys."""
    if values is None:
        return section_cls()
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{section}' must be a mapping")

    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{section}': {', '.join(unknown)}")

    return section_cls(**values)


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_optional_str(value: str) -> Optional[str]:
    return value.strip() or None


def _parse_optional_int(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value else None


def load_config(
    config_path: Optional[Path | str] = None,
    apply_env: bool = True,
    env_file: Optional[Path | str] = None,
) -> VoyageConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.
        env_file: Optional .env file loaded before overrides are applied.
            If None, a .env in the working directory is used when present.

    Returns:
        VoyageConfig instance
    """
    if config_path:
        config = VoyageConfig.from_file(config_path)
    else:
        config = VoyageConfig()

    if apply_env:
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv(find_dotenv(usecwd=True))
        config.apply_env_overrides()

    return config


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Apply a LoggingConfig to the package logger.

    Installs a stream handler on first use; later calls only update the
    level and format.

    Returns:
        The configured "voyage_embed" logger
    """
    package_logger = logging.getLogger("voyage_embed")
    package_logger.setLevel(config.level.upper())

    if not package_logger.handlers:
        package_logger.addHandler(logging.StreamHandler())

    formatter = logging.Formatter(config.format)
    for handler in package_logger.handlers:
        handler.setFormatter(formatter)

    return package_logger
