"""
Fake implementations for testing.

Provides an in-memory embeddings API client for use in unit tests and
offline runs without network access.
"""

from __future__ import annotations

import base64
import hashlib
import math
import struct

from voyage_embed.infrastructure.embedding import (
    EmbeddingApiClientInterface,
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    InvalidArgumentError,
    UsageInfo,
)


class FakeVoyageAIApiClient(EmbeddingApiClientInterface):
    """
    In-memory embeddings API client for testing.

    Returns deterministic pseudo-random vectors based on text hash, encoded
    the way the request asks for (float arrays or base64). No API calls
    required.
    """

    def __init__(self, dimension: int = 1024, reverse_order: bool = False):
        """
        Initialize the fake client.

        Args:
            dimension: Vector size used when the request sets no output_dimension
            reverse_order: Return data entries in reverse index order, the way
                a remote API is allowed to
        """
        self._dimension = dimension
        self._reverse_order = reverse_order
        self.requests: list[EmbeddingRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def create_embeddings(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """Embed the request texts without touching the network."""
        if request is None:
            raise InvalidArgumentError("request must not be None")

        self.requests.append(request)

        texts = [request.input] if isinstance(request.input, str) else list(request.input)
        dimension = request.output_dimension or self._dimension

        data = []
        for index, text in enumerate(texts):
            vector = text_to_vector(text, dimension)
            if request.encoding_format == "base64":
                payload = base64.b64encode(struct.pack(f"<{len(vector)}f", *vector)).decode("ascii")
            else:
                payload = vector
            data.append(EmbeddingData(embedding=payload, index=index))

        if self._reverse_order:
            data.reverse()

        return EmbeddingResponse(
            data=data,
            model=request.model,
            usage=UsageInfo(total_tokens=sum(len(text.split()) for text in texts)),
        )


def text_to_vector(text: str, dimension: int) -> list[float]:
    """
    Convert text to a deterministic unit vector.

    Same text always produces the same embedding.
    """
    text_hash = hashlib.sha256(text.encode("utf-8")).digest()

    # Extend hash if needed to fill dimension
    vector: list[float] = []
    hash_bytes = text_hash

    while len(vector) < dimension:
        for byte in hash_bytes:
            if len(vector) >= dimension:
                break
            # Convert byte to float in range [-1, 1]
            vector.append((byte / 127.5) - 1.0)

        if len(vector) < dimension:
            hash_bytes = hashlib.sha256(hash_bytes).digest()

    norm = math.sqrt(sum(v * v for v in vector))
    if norm > 0:
        vector = [v / norm for v in vector]

    return vector
