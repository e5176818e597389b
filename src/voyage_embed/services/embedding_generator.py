"""
Embedding generator for voyage-embed.

Presents the VoyageAI API client as a "texts in, vectors out" operation for
vector-search pipelines: validates input, builds one request per batch,
restores input order and decodes float arrays or base64 payloads.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from voyage_embed.core.config import EmbeddingOptions
from voyage_embed.infrastructure.embedding import (
    DeserializationError,
    EmbeddingApiClientInterface,
    EmbeddingRequest,
    EmbeddingResponse,
    InvalidArgumentError,
    VoyageAIApiClient,
    decode_embedding,
)
from voyage_embed.infrastructure.embedding.response_parser import sort_by_index

logger = logging.getLogger(__name__)

PROVIDER_NAME = "voyageai"


@dataclass
class Embedding:
    """A single embedding vector."""

    vector: list[float]
    model_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class UsageDetails:
    """Token usage for one generate() call."""

    input_token_count: int = 0
    total_token_count: int = 0


@dataclass
class GeneratedEmbeddings:
    """Embeddings for a batch, in input order, plus usage."""

    embeddings: list[Embedding] = field(default_factory=list)
    usage: UsageDetails = field(default_factory=UsageDetails)

    def __len__(self) -> int:
        return len(self.embeddings)

    def __iter__(self) -> Iterator[Embedding]:
        return iter(self.embeddings)

    def __getitem__(self, index: int) -> Embedding:
        return self.embeddings[index]

    def vectors(self) -> list[list[float]]:
        """Plain vectors, one per input text."""
        return [embedding.vector for embedding in self.embeddings]


@dataclass(frozen=True)
class EmbeddingGeneratorMetadata:
    """Provider and model information for introspection."""

    provider_name: str
    provider_uri: str
    default_model_id: str
    default_model_dimensions: Optional[int] = None


class EmbeddingGeneratorInterface(ABC):
    """Abstract "texts in, vectors out" contract used by vector-search callers."""

    @abstractmethod
    async def generate(self, texts: Sequence[str]) -> GeneratedEmbeddings:
        """
        Generate one embedding per input text.

        Args:
            texts: Ordered batch of non-empty strings

        Returns:
            Embeddings in input order, with token usage
        """
        pass

    @property
    @abstractmethod
    def metadata(self) -> EmbeddingGeneratorMetadata:
        """Describe the provider and model behind this generator."""
        pass

    @abstractmethod
    def get_service(self, service_type: type, service_key: Optional[Any] = None) -> Optional[Any]:
        """Return an object of the requested type held by the generator, if any."""
        pass


class VoyageAIEmbeddingGenerator(EmbeddingGeneratorInterface):
    """
    Embedding generator backed by the VoyageAI embeddings API.

    Stateless between calls: it only holds the shared options and the API
    client, both fixed at construction. Callers batch texts themselves; each
    generate() call issues exactly one logical API request.
    """

    def __init__(
        self,
        api_client: EmbeddingApiClientInterface,
        options: EmbeddingOptions,
        owns_client: bool = False,
    ):
        """
        Initialize the generator.

        Args:
            api_client: Client for the embeddings endpoint
            options: Shared embedding options
            owns_client: Close api_client when the generator is closed

        Raises:
            InvalidArgumentError: If api_client or options is None
        """
        if api_client is None:
            raise InvalidArgumentError("api_client must not be None")
        if options is None:
            raise InvalidArgumentError("options must not be None")

        self._api_client = api_client
        self._options = options
        self._owns_client = owns_client
        self._metadata = EmbeddingGeneratorMetadata(
            provider_name=PROVIDER_NAME,
            provider_uri=options.base_url,
            default_model_id=options.model,
            default_model_dimensions=options.output_dimension,
        )

    @classmethod
    def from_options(cls, options: EmbeddingOptions) -> "VoyageAIEmbeddingGenerator":
        """Create a generator with its own API client."""
        return cls(VoyageAIApiClient(options), options, owns_client=True)

    @classmethod
    def from_api_key(cls, api_key: str, **overrides: Any) -> "VoyageAIEmbeddingGenerator":
        """Create a generator from an API key and default options."""
        return cls.from_options(EmbeddingOptions(api_key=api_key, **overrides))

    @property
    def options(self) -> EmbeddingOptions:
        return self._options

    @property
    def metadata(self) -> EmbeddingGeneratorMetadata:
        return self._metadata

    def get_service(self, service_type: type, service_key: Optional[Any] = None) -> Optional[Any]:
        """Expose the shared options and metadata to callers that ask for them."""
        if service_key is not None:
            return None
        if service_type is EmbeddingOptions:
            return self._options
        if service_type is EmbeddingGeneratorMetadata:
            return self._metadata
        return None

    async def close(self) -> None:
        if self._owns_client:
            await self._api_client.close()

    async def __aenter__(self) -> "VoyageAIEmbeddingGenerator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def generate(self, texts: Sequence[str]) -> GeneratedEmbeddings:
        """
        Generate embeddings for a batch of texts.

        Args:
            texts: Ordered sequence of non-empty strings. An empty sequence
                returns an empty result without calling the API.

        Returns:
            One embedding per text, in input order, with token usage

        Raises:
            InvalidArgumentError: If texts is None or a str, or any text is
                None, not a str, or empty
            DeserializationError: If the response does not hold exactly one
                embedding per input
            DecodingError: If an embedding payload cannot be decoded
            TransportError: If the API call fails
        """
        return await self._generate(texts, self._options)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings and return the plain vectors."""
        result = await self.generate(texts)
        return result.vectors()

    async def embed_query(self, text: str) -> list[float]:
        """Embed a search query with input_type="query"."""
        result = await self._generate([text], self._options.with_overrides(input_type="query"))
        return result[0].vector

    async def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed documents for indexing with input_type="document"."""
        result = await self._generate(
            texts, self._options.with_overrides(input_type="document")
        )
        return result.vectors()

    async def _generate(
        self, texts: Sequence[str], options: EmbeddingOptions
    ) -> GeneratedEmbeddings:
        batch = _validate_texts(texts)
        if not batch:
            return GeneratedEmbeddings()

        request = EmbeddingRequest.from_texts(batch, options)
        logger.debug(f"Generating {len(batch)} embeddings with model {options.model}")

        response = await self._api_client.create_embeddings(request)
        return _to_generated_embeddings(response, len(batch), options.model)


def _validate_texts(texts: Sequence[str]) -> list[str]:
    if texts is None:
        raise InvalidArgumentError("texts must not be None")
    if isinstance(texts, str):
        raise InvalidArgumentError("texts must be a sequence of strings, not a single str")

    batch = list(texts)
    for position, text in enumerate(batch):
        if text is None or text == "":
            raise InvalidArgumentError(
                f"Input values cannot be None or empty (position {position})."
            )
        if not isinstance(text, str):
            raise InvalidArgumentError(
                f"Input values must be str, got {type(text).__name__} at position {position}."
            )
    return batch


def _to_generated_embeddings(
    response: EmbeddingResponse, expected_count: int, default_model: str
) -> GeneratedEmbeddings:
    ordered = sort_by_index(response.data)

    indexes = [item.index for item in ordered]
    if indexes != list(range(expected_count)):
        raise DeserializationError(
            f"Expected embeddings for indexes 0..{expected_count - 1}, got {indexes}"
        )

    model_id = response.model or default_model
    embeddings = [
        Embedding(vector=decode_embedding(item.embedding), model_id=model_id)
        for item in ordered
    ]

    total_tokens = response.usage.total_tokens
    return GeneratedEmbeddings(
        embeddings=embeddings,
        usage=UsageDetails(input_token_count=total_tokens, total_token_count=total_tokens),
    )
