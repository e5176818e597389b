"""Abstract interface for embedding API clients."""

from abc import ABC, abstractmethod

from .models import EmbeddingRequest, EmbeddingResponse


class EmbeddingApiClientInterface(ABC):
    """Abstract interface for clients of the embeddings endpoint."""

    @abstractmethod
    async def create_embeddings(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """
        Create embeddings for the texts in a request.

        Args:
            request: Populated embedding request

        Returns:
            The parsed API response
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the client."""
        return None
