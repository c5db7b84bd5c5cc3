"""Unit tests for the adapter dispatch table and the Anthropic pass-through adapter."""

import pytest

from ccs_router.core.adapters import (
    ADAPTERS,
    ANTHROPIC_ADAPTER,
    AdapterSpec,
    get_adapter,
    register_adapter,
    supported_adapter_kinds,
)
from ccs_router.core.exceptions import UnknownAdapterError
from ccs_router.core.provider import ProviderDescriptor, ProviderKind


def make_descriptor(**overrides) -> ProviderDescriptor:
    values = {
        "name": "glm",
        "kind": ProviderKind.CREDENTIAL_PROFILE,
        "adapter_kind": "anthropic",
        "base_url": "https://api.z.ai/api/anthropic",
    }
    values.update(overrides)
    return ProviderDescriptor(**values)


@pytest.mark.unit
class TestDispatchTable:
    def test_anthropic_is_registered(self):
        assert get_adapter("anthropic") is ANTHROPIC_ADAPTER
        assert "anthropic" in supported_adapter_kinds()

    def test_unknown_kind_raises(self):
        with pytest.raises(UnknownAdapterError) as exc_info:
            get_adapter("openai")
        assert exc_info.value.kind == "openai"

    def test_register_adds_one_entry(self, monkeypatch):
        monkeypatch.setattr("ccs_router.core.adapters.base.ADAPTERS", dict(ADAPTERS))
        upper = AdapterSpec(
            kind="upper",
            build_request=lambda req, model, d: {"MODEL": model.upper()},
            parse_response=lambda res: {"content": res["TEXT"]},
            parse_stream_chunk=lambda chunk: chunk.lower(),
            headers=lambda d: {"X-Upper": "1"},
            endpoint=lambda d: f"{d.base_url}/complete",
        )

        register_adapter(upper)
        adapter = get_adapter(make_descriptor(adapter_kind="upper").adapter_kind)

        assert adapter.build_request({}, "glm-4.7", make_descriptor()) == {"MODEL": "GLM-4.7"}
        assert adapter.parse_response({"TEXT": "hi"}) == {"content": "hi"}
        assert get_adapter("anthropic") is ANTHROPIC_ADAPTER


@pytest.mark.unit
class TestAnthropicAdapter:
    def test_build_request_only_overwrites_model(self, anthropic_message_request):
        built = ANTHROPIC_ADAPTER.build_request(
            anthropic_message_request, "glm-4.7", make_descriptor()
        )

        assert built["model"] == "glm-4.7"
        assert built["messages"] == anthropic_message_request["messages"]
        assert built["max_tokens"] == 100
        # Input is not mutated
        assert anthropic_message_request["model"] == "claude-sonnet-4-20250514"

    def test_parse_response_and_chunks_pass_through(self, anthropic_message_response):
        assert ANTHROPIC_ADAPTER.parse_response(anthropic_message_response) is anthropic_message_response
        chunk = 'data: {"type":"message_stop"}'
        assert ANTHROPIC_ADAPTER.parse_stream_chunk(chunk) is chunk

    def test_headers_without_token(self):
        headers = ANTHROPIC_ADAPTER.headers(make_descriptor())

        assert headers == {"Content-Type": "application/json"}

    def test_headers_with_token(self):
        headers = ANTHROPIC_ADAPTER.headers(make_descriptor(auth_token="tok123"))

        assert headers["Authorization"] == "Bearer tok123"
        assert headers["Content-Type"] == "application/json"

    def test_extra_headers_are_merged_last(self):
        descriptor = make_descriptor(
            auth_token="tok123",
            extra_headers={"Authorization": "Token override", "X-Title": "ccs"},
        )

        headers = ANTHROPIC_ADAPTER.headers(descriptor)

        assert headers["Authorization"] == "Token override"
        assert headers["X-Title"] == "ccs"

    @pytest.mark.parametrize(
        "base_url,expected",
        [
            ("https://api.z.ai/api/anthropic", "https://api.z.ai/api/anthropic/v1/messages"),
            ("https://api.z.ai/api/anthropic/", "https://api.z.ai/api/anthropic/v1/messages"),
            ("https://api.anthropic.com/v1", "https://api.anthropic.com/v1/messages"),
            ("https://api.anthropic.com/v1///", "https://api.anthropic.com/v1/messages"),
            (
                "http://127.0.0.1:8317/api/provider/agy/v1",
                "http://127.0.0.1:8317/api/provider/agy/v1/messages",
            ),
        ],
    )
    def test_endpoint(self, base_url, expected):
        assert ANTHROPIC_ADAPTER.endpoint(make_descriptor(base_url=base_url)) == expected


@pytest.mark.unit
class TestProviderDescriptor:
    def test_rejects_relative_base_url(self):
        with pytest.raises(ValueError):
            make_descriptor(base_url="/api/anthropic")

    @pytest.mark.parametrize("base_url", [123, None, b"https://api.z.ai"])
    def test_rejects_non_string_base_url(self, base_url):
        with pytest.raises(ValueError):
            make_descriptor(base_url=base_url)

    def test_token_is_hidden_from_repr_and_dict(self):
        descriptor = make_descriptor(auth_token="tok123")

        assert "tok123" not in repr(descriptor)
        assert "tok123" not in str(descriptor.to_dict())
        assert descriptor.to_dict()["has_auth_token"] is True

    def test_is_immutable(self):
        descriptor = make_descriptor()
        with pytest.raises(AttributeError):
            descriptor.base_url = "https://other.example.com"
