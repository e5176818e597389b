"""Response parsing logic for the VoyageAI embedding API."""

import base64
import binascii
import json
import logging
import math
import sys
from array import array
from dataclasses import dataclass
from typing import Any, Union

import httpx
from pydantic import ValidationError

from .errors import DecodingError, DeserializationError
from .models import EmbeddingData, EmbeddingResponse, ErrorResponse

logger = logging.getLogger(__name__)

_FLOAT32_SIZE = array("f").itemsize


@dataclass(frozen=True)
class NumericArray:
    """Embedding sent as a JSON array of numbers."""

    values: tuple


@dataclass(frozen=True)
class PackedBase64:
    """Embedding sent as base64 of little-endian float32 values."""

    data: str


EmbeddingPayload = Union[NumericArray, PackedBase64]


def parse_embedding_response(body: str) -> EmbeddingResponse:
    """
    Parse a success response body.

    Args:
        body: Raw response text

    Returns:
        Validated EmbeddingResponse

    Raises:
        DeserializationError: If the body is empty, not JSON, or not shaped
            like an embedding response
    """
    if not body or not body.strip():
        raise DeserializationError("Failed to deserialize embedding response: empty body")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Failed to deserialize embedding response: {e}") from e

    if data is None:
        raise DeserializationError("Failed to deserialize embedding response: null body")

    try:
        return EmbeddingResponse.model_validate(data)
    except ValidationError as e:
        raise DeserializationError(f"Invalid embedding response format: {e}") from e


def extract_error_detail(response: httpx.Response) -> str:
    """
    Best-effort error message for a failed response.

    Prefers the "detail" field of a JSON error body, then the raw body,
    then the HTTP reason phrase. Never raises.
    """
    text = response.text
    detail = None

    try:
        detail = ErrorResponse.model_validate_json(text).detail
    except ValueError:
        # Not a JSON error body; fall back to the raw text
        pass

    return detail or text or response.reason_phrase or "Unknown error"


def sort_by_index(data: list[EmbeddingData]) -> list[EmbeddingData]:
    """Order embeddings by their position in the request input."""
    return sorted(data, key=lambda item: item.index)


def classify_payload(value: Any) -> EmbeddingPayload:
    """
    Decide the payload form from the observed JSON value.

    Raises:
        DecodingError: If the value is neither a list nor a string
    """
    if isinstance(value, list):
        return NumericArray(tuple(value))
    if isinstance(value, str):
        return PackedBase64(value)
    raise DecodingError(f"Unsupported embedding data type: {type(value).__name__}")


def decode_payload(payload: EmbeddingPayload) -> list[float]:
    """Decode a classified payload to float32 values."""
    if isinstance(payload, NumericArray):
        return _decode_numeric(payload.values)
    if isinstance(payload, PackedBase64):
        return _decode_base64(payload.data)
    raise DecodingError(f"Unsupported embedding payload: {type(payload).__name__}")


def decode_embedding(value: Any) -> list[float]:
    """Decode a raw "embedding" JSON value to float32 values."""
    return decode_payload(classify_payload(value))


def _decode_numeric(values: tuple) -> list[float]:
    for position, element in enumerate(values):
        # bool is an int subclass but never a valid vector component
        if isinstance(element, bool) or not isinstance(element, (int, float)):
            raise DecodingError(
                f"Unexpected element type in embedding array at position {position}: "
                f"{type(element).__name__}"
            )

    try:
        floats = array("f", values)
    except OverflowError as e:
        raise DecodingError(f"Embedding value out of float32 range: {e}") from e

    for position, (element, narrowed) in enumerate(zip(values, floats)):
        if math.isinf(narrowed) and not math.isinf(element):
            raise DecodingError(
                f"Embedding value out of float32 range at position {position}: {element!r}"
            )
    return floats.tolist()


def _decode_base64(data: str) -> list[float]:
    # Wrapped base64 may carry line breaks
    data = "".join(data.split())
    if not data:
        raise DecodingError("Base64 embedding string is null or empty.")

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodingError(f"Invalid base64 embedding: {e}") from e

    if len(raw) % _FLOAT32_SIZE != 0:
        raise DecodingError(
            f"Base64 embedding has {len(raw)} bytes, not a multiple of {_FLOAT32_SIZE}"
        )

    floats = array("f")
    floats.frombytes(raw)
    if sys.byteorder == "big":
        floats.byteswap()
    return floats.tolist()
