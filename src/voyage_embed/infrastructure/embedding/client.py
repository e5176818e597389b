"""VoyageAI embeddings API client implementation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

import httpx

from voyage_embed.core.config import EmbeddingOptions

from .errors import InvalidArgumentError, TransportError
from .interface import EmbeddingApiClientInterface
from .models import EmbeddingRequest, EmbeddingResponse
from .response_parser import extract_error_detail, parse_embedding_response
from .retry import RetryConfig, RetryState, is_retryable_status

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class VoyageAIApiClient(EmbeddingApiClientInterface):
    """
    Client for the VoyageAI / MongoDB Atlas embeddings endpoint.

    Each create_embeddings() call posts to <base_url>/embeddings and retries
    rate limits (429), server errors (500, 502, 503, 504), timeouts and
    connection failures with linear backoff: the n-th retry waits
    retry_delay_ms * n. Other error statuses fail immediately.

    The client keeps no per-call state, so one instance can serve concurrent
    callers. The underlying httpx.AsyncClient is created lazily with
    connection pooling and reused across calls. An injected http_client is
    used as is and never closed by this class.
    """

    def __init__(
        self,
        options: EmbeddingOptions,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the API client.

        Args:
            options: Shared embedding options
            http_client: Optional preconfigured HTTP client
            sleep: Awaitable used for backoff waits, defaults to asyncio.sleep

        Raises:
            InvalidArgumentError: If options is None
            ValueError: If no API key is configured
        """
        if options is None:
            raise InvalidArgumentError("options must not be None")
        if not options.api_key or not options.api_key.strip():
            raise ValueError(
                "VoyageAI API key is required. Please set EmbeddingOptions.api_key."
            )

        self._options = options
        self._retry_config = RetryConfig.from_options(options)
        self._url = options.embeddings_url
        self._headers = {
            "Authorization": f"Bearer {options.api_key}",
            "Content-Type": "application/json",
        }
        self._sleep = sleep or asyncio.sleep

        self._client = http_client
        self._owns_client = http_client is None

    @property
    def options(self) -> EmbeddingOptions:
        return self._options

    @property
    def url(self) -> str:
        """Endpoint every request is posted to."""
        return self._url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = httpx.AsyncClient(
                timeout=self._options.request_timeout,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "VoyageAIApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def create_embeddings(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """
        Create embeddings, retrying transient failures.

        Args:
            request: Populated embedding request

        Returns:
            Parsed embedding response

        Raises:
            InvalidArgumentError: If request is None
            TransportError: For a non-retryable status, or a retryable one on
                the last attempt
            DeserializationError: If a success body cannot be parsed
            httpx.TransportError: The last network error or timeout once
                attempts are exhausted
        """
        if request is None:
            raise InvalidArgumentError("request must not be None")

        config = self._retry_config
        payload = request.to_payload()
        client = await self._get_client()

        state = RetryState.ATTEMPTING
        attempts = 0
        result: Optional[EmbeddingResponse] = None
        failure: Optional[TransportError] = None
        network_error: Optional[httpx.TransportError] = None

        while state in (RetryState.ATTEMPTING, RetryState.WAITING):
            if state is RetryState.WAITING:
                delay = config.delay_for(attempts)
                logger.warning(
                    f"Attempt {attempts} of {config.max_attempts} failed. "
                    f"Retrying in {delay:.1f}s..."
                )
                await self._sleep(delay)
                state = RetryState.ATTEMPTING
                continue

            attempts += 1
            logger.debug(
                f"POST {self._url} (attempt {attempts}, model={request.model}, "
                f"batch={request.batch_size})"
            )

            try:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers=self._headers,
                    timeout=self._options.request_timeout,
                )
            except httpx.TransportError as e:
                # Timeouts and connection failures
                network_error = e
                logger.warning(f"Request error on attempt {attempts}: {e!r}")
                state = (
                    RetryState.WAITING
                    if config.can_retry(attempts)
                    else RetryState.EXHAUSTED_FAILED
                )
                continue

            network_error = None

            if response.is_success:
                result = parse_embedding_response(response.text)
                state = RetryState.SUCCEEDED
                continue

            failure = TransportError(
                status_code=response.status_code,
                detail=extract_error_detail(response),
                url=str(response.request.url),
            )
            if not is_retryable_status(response.status_code):
                state = RetryState.FATAL_FAILED
            elif config.can_retry(attempts):
                logger.warning(f"Retryable status {response.status_code}: {failure.detail}")
                state = RetryState.WAITING
            else:
                state = RetryState.EXHAUSTED_FAILED

        if state is RetryState.SUCCEEDED and result is not None:
            return result

        if state is RetryState.EXHAUSTED_FAILED:
            logger.error(f"All {attempts} attempts failed for {self._url}")
        else:
            logger.error(f"Non-retryable error from {self._url}: {failure}")

        if network_error is not None:
            raise network_error
        raise failure
