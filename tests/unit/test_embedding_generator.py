import asyncio
import base64
import struct

import pytest

from tests.support.http_mocks import ScriptedTransport, embedding_body, make_client, make_options
from voyage_embed.core.config import EmbeddingOptions
from voyage_embed.infrastructure.embedding import (
    DecodingError,
    DeserializationError,
    InvalidArgumentError,
    VoyageAIApiClient,
)
from voyage_embed.infrastructure.fakes import FakeVoyageAIApiClient
from voyage_embed.services.embedding_generator import (
    EmbeddingGeneratorMetadata,
    VoyageAIEmbeddingGenerator,
)


def _pack(values) -> str:
    return base64.b64encode(struct.pack(f"<{len(values)}f", *values)).decode("ascii")


def _generator(transport: ScriptedTransport, **overrides) -> VoyageAIEmbeddingGenerator:
    client = make_client(transport, **overrides)
    return VoyageAIEmbeddingGenerator(client, client.options)


def test_entries_are_reordered_by_index() -> None:
    transport = ScriptedTransport(
        (200, embedding_body([[2.0, 2.0], [1.0, 1.0]], indexes=[1, 0]))
    )
    generator = _generator(transport)

    result = asyncio.run(generator.generate(["first", "second"]))

    assert result.vectors() == [[1.0, 1.0], [2.0, 2.0]]


def test_single_text_is_sent_as_bare_string() -> None:
    transport = ScriptedTransport((200, embedding_body([[0.5]])))
    generator = _generator(transport)

    asyncio.run(generator.generate(["only one"]))

    assert transport.bodies()[0]["input"] == "only one"


def test_multiple_texts_are_sent_as_list() -> None:
    transport = ScriptedTransport((200, embedding_body([[0.5], [0.25]])))
    generator = _generator(transport)

    asyncio.run(generator.generate(("a", "b")))

    assert transport.bodies()[0]["input"] == ["a", "b"]


def test_empty_batch_makes_no_http_call() -> None:
    transport = ScriptedTransport((200, embedding_body([])))
    generator = _generator(transport)

    result = asyncio.run(generator.generate([]))

    assert len(result) == 0
    assert result.usage.total_token_count == 0
    assert transport.call_count == 0


@pytest.mark.parametrize(
    "texts",
    [
        None,
        "a single string",
        ["ok", ""],
        ["", "ok"],
        ["ok", None],
        ["ok", 42],
    ],
)
def test_invalid_input_is_rejected_before_any_call(texts) -> None:
    transport = ScriptedTransport((200, embedding_body([[1.0], [1.0]])))
    generator = _generator(transport)

    with pytest.raises(InvalidArgumentError):
        asyncio.run(generator.generate(texts))

    assert transport.call_count == 0


def test_float_and_base64_payloads_decode_identically() -> None:
    vector = [1.0, 2.0, 3.0]
    float_transport = ScriptedTransport((200, embedding_body([vector])))
    base64_transport = ScriptedTransport((200, embedding_body([_pack(vector)])))

    from_floats = asyncio.run(_generator(float_transport).generate(["x"]))
    from_base64 = asyncio.run(
        _generator(base64_transport, encoding_format="base64").generate(["x"])
    )

    assert from_floats.vectors() == from_base64.vectors() == [vector]
    assert base64_transport.bodies()[0]["encoding_format"] == "base64"


def test_payload_shape_wins_over_requested_encoding() -> None:
    transport = ScriptedTransport((200, embedding_body([_pack([0.5, -0.5])])))
    generator = _generator(transport)

    result = asyncio.run(generator.generate(["x"]))

    assert result[0].vector == [0.5, -0.5]


def test_numeric_values_are_narrowed_to_float32() -> None:
    transport = ScriptedTransport((200, embedding_body([[0.1]])))
    generator = _generator(transport)

    result = asyncio.run(generator.generate(["x"]))

    assert result[0].vector == [struct.unpack("<f", struct.pack("<f", 0.1))[0]]


@pytest.mark.parametrize(
    "payload",
    [
        [1.0, "two", 3.0],
        [1.0, True],
        [1.0, None],
        [1.0, 1e39],
        [-(10**39)],
        "",
        " \n ",
        "not base64!!",
        base64.b64encode(b"\x00\x00\x80").decode("ascii"),
        {"values": [1.0]},
        42,
        None,
    ],
)
def test_undecodable_payload_raises_decoding_error(payload) -> None:
    transport = ScriptedTransport((200, embedding_body([payload])))
    generator = _generator(transport)

    with pytest.raises(DecodingError):
        asyncio.run(generator.generate(["x"]))


def test_base64_payload_with_line_breaks_is_accepted() -> None:
    packed = base64.b64encode(struct.pack("<4f", 1.0, 2.0, 3.0, 4.0)).decode("ascii")
    wrapped = packed[:8] + "\r\n" + packed[8:16] + "\n " + packed[16:]
    transport = ScriptedTransport((200, embedding_body([wrapped])))

    result = asyncio.run(_generator(transport).generate(["x"]))

    assert result.vectors() == [[1.0, 2.0, 3.0, 4.0]]


def test_usage_reports_total_tokens_as_input_tokens() -> None:
    transport = ScriptedTransport((200, embedding_body([[1.0], [2.0]], total_tokens=17)))
    generator = _generator(transport)

    result = asyncio.run(generator.generate(["a", "b"]))

    assert result.usage.input_token_count == 17
    assert result.usage.total_token_count == 17


def test_model_id_comes_from_response() -> None:
    transport = ScriptedTransport((200, embedding_body([[1.0]], model="voyage-4-lite")))
    generator = _generator(transport)

    result = asyncio.run(generator.generate(["a"]))

    assert result[0].model_id == "voyage-4-lite"
    assert result[0].dimensions == 1


@pytest.mark.parametrize(
    "vectors,indexes",
    [
        ([[1.0]], [0]),
        ([[1.0], [2.0], [3.0]], [0, 1, 2]),
        ([[1.0], [2.0]], [0, 0]),
        ([[1.0], [2.0]], [1, 2]),
    ],
)
def test_mismatched_result_count_is_rejected(vectors, indexes) -> None:
    transport = ScriptedTransport((200, embedding_body(vectors, indexes=indexes)))
    generator = _generator(transport)

    with pytest.raises(DeserializationError):
        asyncio.run(generator.generate(["a", "b"]))


def test_request_carries_options() -> None:
    transport = ScriptedTransport((200, embedding_body([[1.0], [2.0]])))
    generator = _generator(
        transport,
        model="voyage-code-3",
        input_type="document",
        truncation=False,
        output_dimension=512,
        output_dtype="int8",
    )

    asyncio.run(generator.generate(["a", "b"]))

    assert transport.bodies()[0] == {
        "input": ["a", "b"],
        "model": "voyage-code-3",
        "input_type": "document",
        "truncation": False,
        "output_dimension": 512,
        "output_dtype": "int8",
    }


def test_embed_query_sets_input_type_for_one_call() -> None:
    transport = ScriptedTransport((200, embedding_body([[0.5, 0.5]])))
    generator = _generator(transport)

    vector = asyncio.run(generator.embed_query("what is a vector?"))

    assert vector == [0.5, 0.5]
    assert transport.bodies()[0]["input_type"] == "query"
    assert generator.options.input_type is None


def test_embed_documents_uses_document_input_type() -> None:
    fake = FakeVoyageAIApiClient(dimension=8)
    generator = VoyageAIEmbeddingGenerator(fake, make_options())

    vectors = asyncio.run(generator.embed_documents(["doc one", "doc two"]))

    assert len(vectors) == 2
    assert all(len(v) == 8 for v in vectors)
    assert fake.requests[0].input_type == "document"


def test_fake_client_out_of_order_base64_round_trip() -> None:
    fake = FakeVoyageAIApiClient(reverse_order=True)
    options = make_options(encoding_format="base64", output_dimension=256)
    generator = VoyageAIEmbeddingGenerator(fake, options)

    result = asyncio.run(generator.generate(["alpha", "beta", "gamma"]))
    again = asyncio.run(generator.generate(["gamma"]))

    assert len(result) == 3
    assert all(embedding.dimensions == 256 for embedding in result)
    assert result[2].vector == again[0].vector
    assert result[0].vector != result[1].vector


def test_metadata_and_get_service() -> None:
    options = make_options(model="voyage-4", output_dimension=1024)
    generator = VoyageAIEmbeddingGenerator(FakeVoyageAIApiClient(), options)

    assert generator.metadata == EmbeddingGeneratorMetadata(
        provider_name="voyageai",
        provider_uri=options.base_url,
        default_model_id="voyage-4",
        default_model_dimensions=1024,
    )
    assert generator.get_service(EmbeddingOptions) is options
    assert generator.get_service(EmbeddingGeneratorMetadata) is generator.metadata
    assert generator.get_service(EmbeddingOptions, service_key="other") is None
    assert generator.get_service(str) is None


def test_constructor_rejects_missing_collaborators() -> None:
    with pytest.raises(InvalidArgumentError):
        VoyageAIEmbeddingGenerator(None, make_options())  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        VoyageAIEmbeddingGenerator(FakeVoyageAIApiClient(), None)  # type: ignore[arg-type]


def test_from_api_key_builds_owned_client() -> None:
    generator = VoyageAIEmbeddingGenerator.from_api_key("secret", model="voyage-4-lite")

    assert isinstance(generator._api_client, VoyageAIApiClient)
    assert generator.options.api_key == "secret"
    assert generator.options.model == "voyage-4-lite"

    asyncio.run(generator.close())


def test_from_api_key_requires_key() -> None:
    with pytest.raises(ValueError):
        VoyageAIEmbeddingGenerator.from_api_key("")
