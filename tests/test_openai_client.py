"""
Tests for the OpenAI edit/generate adapter, including the single fallback.
"""
import json

import httpx
import pytest

from redesigner.core.types import ErrorKind, Failure, GenerationRequest, StyleParameters, Success
from redesigner.image.openai_client import OpenAIImageEdit
from redesigner.image.provider_config import ProviderConfig

from provider_stubs import RecordingTransport, b64_json_response


EDIT_URL = "https://api.openai.com/v1/images/edits"
GENERATE_URL = "https://api.openai.com/v1/images/generations"


def _adapter(config, responder):
    transport = RecordingTransport(responder)
    return OpenAIImageEdit(config, transport=transport), transport


def _by_url(edit, generate):
    def responder(request):
        if str(request.url) == EDIT_URL:
            return edit(request)
        return generate(request)
    return responder


def _rejected(request):
    return httpx.Response(400, json={"error": {"message": "Invalid image"}})


class TestEdit:

    @pytest.mark.asyncio
    async def test_successful_edit_makes_one_call(self, openai_config, generation_request):
        adapter, transport = _adapter(openai_config, lambda req: b64_json_response(b"edited"))

        result = await adapter.adapt(generation_request)

        assert result == Success(b"edited", "image/png")
        assert [str(r.url) for r in transport.requests] == [EDIT_URL]

        sent = transport.requests[0]
        assert sent.headers["authorization"] == "Bearer sk-openai-test"
        assert sent.headers["accept"] == "application/json"
        assert sent.headers["content-type"].startswith("multipart/form-data")
        assert b'name="image"; filename="room.jpg"' in sent.content
        assert b'name="model"\r\n\r\ngpt-image-1' in sent.content
        assert b'name="prompt"\r\n\r\nRedesign this living room in Modern style.' in sent.content
        assert b"response_format" not in sent.content

    def test_dalle_models_request_b64_json(self, generation_request):
        config = ProviderConfig(provider="openai", openai_api_key="k", openai_image_model="dall-e-2")

        data, files = OpenAIImageEdit(config).build_edit_form(generation_request)

        assert data["response_format"] == "b64_json"
        assert data["model"] == "dall-e-2"
        assert files["image"][0] == "room.jpg"

    @pytest.mark.asyncio
    async def test_output_format_sets_mime(self, openai_config, generation_request):
        request = GenerationRequest(
            image=generation_request.image,
            params=StyleParameters(output_format="jpeg"),
            prompt="p",
        )
        adapter, transport = _adapter(openai_config, lambda req: b64_json_response(b"jpg"))

        result = await adapter.adapt(request)

        assert result == Success(b"jpg", "image/jpeg")
        assert b'name="output_format"\r\n\r\njpeg' in transport.requests[0].content


class TestFallback:

    @pytest.mark.asyncio
    async def test_rejected_edit_falls_back_to_generate_once(self, openai_config, generation_request):
        adapter, transport = _adapter(
            openai_config,
            _by_url(edit=_rejected, generate=lambda req: b64_json_response(b"generated")),
        )

        result = await adapter.adapt(generation_request)

        assert result == Success(b"generated", "image/png")
        assert [str(r.url) for r in transport.requests] == [EDIT_URL, GENERATE_URL]

        generate = transport.requests[1]
        assert generate.headers["content-type"] == "application/json"
        body = json.loads(generate.content)
        assert body["prompt"] == "Redesign this living room in Modern style."
        assert body["n"] == 1
        assert "image" not in body

    @pytest.mark.asyncio
    async def test_no_third_call_when_both_fail(self, openai_config, generation_request):
        adapter, transport = _adapter(openai_config, _rejected)

        result = await adapter.adapt(generation_request)

        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.PROVIDER_REJECTED
        assert "Invalid image" in result.provider_message
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_empty_edit_result_falls_back(self, openai_config, generation_request):
        adapter, transport = _adapter(
            openai_config,
            _by_url(
                edit=lambda req: httpx.Response(200, json={"data": []}),
                generate=lambda req: b64_json_response(b"generated"),
            ),
        )

        result = await adapter.adapt(generation_request)

        assert result == Success(b"generated", "image/png")
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_generate_without_payload_is_empty_result(self, openai_config, generation_request):
        adapter, transport = _adapter(
            openai_config,
            _by_url(edit=_rejected, generate=lambda req: httpx.Response(200, json={"data": [{"url": "x"}]})),
        )

        result = await adapter.adapt(generation_request)

        assert result.kind == ErrorKind.EMPTY_RESULT
        assert '"url"' in result.provider_message
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self, openai_config, generation_request):
        def responder(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        adapter, transport = _adapter(openai_config, responder)

        result = await adapter.adapt(generation_request)

        assert result.kind == ErrorKind.TIMEOUT
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_network_failure_is_not_retried(self, openai_config, generation_request):
        def responder(request):
            raise httpx.ConnectError("refused", request=request)

        adapter, transport = _adapter(openai_config, responder)

        result = await adapter.adapt(generation_request)

        assert result.kind == ErrorKind.NETWORK_FAILURE
        assert len(transport.requests) == 1
