"""Wire models for the VoyageAI embeddings endpoint."""

from collections.abc import Sequence
from typing import Any, Optional, Union

from pydantic import BaseModel

from voyage_embed.core.config import EmbeddingOptions


class EmbeddingRequest(BaseModel):
    """Request body for POST /embeddings."""

    # A single text is sent as a bare string, a batch as a list
    input: Union[str, list[str]]
    model: str
    input_type: Optional[str] = None
    truncation: bool = True
    output_dimension: Optional[int] = None
    output_dtype: Optional[str] = None
    encoding_format: Optional[str] = None

    @classmethod
    def from_texts(cls, texts: Sequence[str], options: EmbeddingOptions) -> "EmbeddingRequest":
        """Build a request for a batch of texts using the shared options."""
        return cls(
            input=texts[0] if len(texts) == 1 else list(texts),
            model=options.model,
            input_type=options.input_type,
            truncation=options.truncation,
            output_dimension=options.output_dimension,
            output_dtype=options.output_dtype,
            encoding_format=options.encoding_format,
        )

    @property
    def batch_size(self) -> int:
        """Number of texts carried by the request."""
        return 1 if isinstance(self.input, str) else len(self.input)

    def to_payload(self) -> dict[str, Any]:
        """JSON body with unset optional fields left out."""
        return self.model_dump(exclude_none=True)


class EmbeddingData(BaseModel):
    """One embedding in a response."""

    object: str = "embedding"
    # List of numbers or a base64 string; the shape is inspected when decoding
    embedding: Any
    index: int


class UsageInfo(BaseModel):
    """Token usage; the API reports only the total."""

    total_tokens: int


class EmbeddingResponse(BaseModel):
    """Response body of POST /embeddings."""

    object: str = "list"
    data: list[EmbeddingData]
    model: str = ""
    usage: UsageInfo


class ErrorResponse(BaseModel):
    """Error body, e.g. {"detail": "Invalid API key"}."""

    detail: Optional[str] = None
