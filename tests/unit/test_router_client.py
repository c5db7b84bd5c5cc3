"""Unit tests for RoutedClient using RESPX-mocked upstreams."""

import json

import httpx
import pytest

from ccs_router.core.exceptions import (
    MissingModelError,
    ProviderNotFoundError,
    ProviderUnavailableError,
    UnknownAdapterError,
    UpstreamError,
)
from ccs_router.core.router_client import RoutedClient
from tests.fixtures.mock_http import create_anthropic_error, create_streaming_response

MESSAGES_PATH = "/api/anthropic/v1/messages"
MODELS_PATH = "/api/anthropic/models"


@pytest.fixture
def glm_config(write_config, write_settings):
    settings = write_settings(
        "glm",
        {"ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic", "ANTHROPIC_AUTH_TOKEN": "tok123"},
    )
    write_config(
        f"""
        profiles:
          glm:
            settings: {settings}
        """
    )


@pytest.fixture
def client(resolver, health_monitor):
    return RoutedClient(resolver, health_monitor, timeout=5)


@pytest.mark.unit
@pytest.mark.asyncio
class TestSendMessage:
    async def test_forwards_to_resolved_provider(
        self, glm_config, client, mock_zai_api, anthropic_message_request, anthropic_message_response
    ):
        mock_zai_api.get(MODELS_PATH).mock(return_value=httpx.Response(200, json={"data": []}))
        route = mock_zai_api.post(MESSAGES_PATH).mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        result = await client.send_message("glm", anthropic_message_request, "glm-4.7")

        assert result == anthropic_message_response
        sent = route.calls.last.request
        assert sent.headers["Authorization"] == "Bearer tok123"
        body = json.loads(sent.content)
        assert body["model"] == "glm-4.7"
        assert body["messages"] == anthropic_message_request["messages"]

    async def test_uses_request_model_without_target(
        self, glm_config, client, mock_zai_api, anthropic_message_request, anthropic_message_response
    ):
        route = mock_zai_api.post(MESSAGES_PATH).mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        await client.send_message("glm", anthropic_message_request, check_health=False)

        assert json.loads(route.calls.last.request.content)["model"] == "claude-sonnet-4-20250514"

    async def test_requires_a_model(self, glm_config, client):
        with pytest.raises(MissingModelError):
            await client.send_message(
                "glm", {"messages": [], "max_tokens": 1}, check_health=False
            )

    async def test_unknown_provider(self, client, anthropic_message_request):
        with pytest.raises(ProviderNotFoundError):
            await client.send_message("nope", anthropic_message_request)

    async def test_unhealthy_provider_is_not_called(
        self, glm_config, client, mock_zai_api, anthropic_message_request
    ):
        mock_zai_api.get(MODELS_PATH).mock(return_value=httpx.Response(503))

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await client.send_message("glm", anthropic_message_request)

        assert exc_info.value.error == "HTTP 503: Service Unavailable"
        assert [call.request.method for call in mock_zai_api.calls] == ["GET"]

    async def test_upstream_error_keeps_status_and_body(
        self, glm_config, client, mock_zai_api, anthropic_message_request
    ):
        error_body = create_anthropic_error(429, "rate_limit_error", "slow down")
        mock_zai_api.post(MESSAGES_PATH).mock(return_value=httpx.Response(429, json=error_body))

        with pytest.raises(UpstreamError) as exc_info:
            await client.send_message("glm", anthropic_message_request, check_health=False)

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == error_body

    async def test_non_json_success_body_is_bad_gateway(
        self, glm_config, client, mock_zai_api, anthropic_message_request
    ):
        mock_zai_api.post(MESSAGES_PATH).mock(
            return_value=httpx.Response(200, text="<html>maintenance</html>")
        )

        with pytest.raises(UpstreamError) as exc_info:
            await client.send_message("glm", anthropic_message_request, check_health=False)

        assert exc_info.value.status_code == 502
        assert "non-JSON" in str(exc_info.value.detail)

    async def test_network_failure_is_bad_gateway(
        self, glm_config, client, mock_zai_api, anthropic_message_request
    ):
        mock_zai_api.post(MESSAGES_PATH).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamError) as exc_info:
            await client.send_message("glm", anthropic_message_request, check_health=False)

        assert exc_info.value.status_code == 502

    async def test_unknown_adapter_kind(self, write_config, client, anthropic_message_request):
        write_config(
            """
            router:
              providers:
                legacy:
                  base_url: https://llm.example.com
                  adapter: openai
            """
        )

        with pytest.raises(UnknownAdapterError):
            await client.send_message("legacy", anthropic_message_request, check_health=False)

    async def test_multiplexer_provider_uses_cliproxy_path(
        self,
        client,
        auth_status,
        mock_cliproxy_api,
        anthropic_message_request,
        anthropic_message_response,
    ):
        auth_status.authenticated.add("agy")
        route = mock_cliproxy_api.post("/api/provider/agy/v1/messages").mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        await client.send_message("agy", anthropic_message_request, "gemini-3-pro")

        assert route.call_count == 1
        assert "Authorization" not in route.calls.last.request.headers


@pytest.mark.unit
@pytest.mark.asyncio
class TestStreamMessage:
    async def test_yields_non_empty_lines(
        self, glm_config, client, mock_zai_api, anthropic_message_request, anthropic_streaming_events
    ):
        route = mock_zai_api.post(MESSAGES_PATH).mock(
            return_value=create_streaming_response(anthropic_streaming_events)
        )

        chunks = [
            chunk
            async for chunk in client.stream_message(
                "glm", anthropic_message_request, check_health=False
            )
        ]

        assert chunks[0] == "event: message_start"
        assert chunks[-1] == 'data: {"type":"message_stop"}'
        assert all(chunk.strip() for chunk in chunks)
        assert json.loads(route.calls.last.request.content)["stream"] is True

    async def test_error_status_raises_before_first_chunk(
        self, glm_config, client, mock_zai_api, anthropic_message_request
    ):
        error_body = create_anthropic_error(401, "authentication_error", "bad key")
        mock_zai_api.post(MESSAGES_PATH).mock(return_value=httpx.Response(401, json=error_body))

        stream = client.stream_message("glm", anthropic_message_request, check_health=False)

        with pytest.raises(UpstreamError) as exc_info:
            await stream.__anext__()
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == error_body
