"""OpenAI Images adapter (edit with source image, generate as fallback).

Processing flow:
    1. `images/edits` multipart call with the source photo and prompt.
    2. If the edit is rejected (non-2xx) or yields no image payload, make
       exactly one `images/generations` JSON call with the prompt only.
    3. Both responses carry the image as base64 under `data[0].b64_json`.

Retry behavior:
    The edit -> generate step is the only retry in the pipeline and happens at
    most once. Timeouts and network failures are reported, not retried.

Determinism:
    Request assembly is deterministic for fixed inputs/configuration. Output
    images are not.
"""

import logging

import httpx

from redesigner.core.types import (
    ErrorKind,
    Failure,
    GenerationRequest,
    GenerationResult,
    Success,
)
from redesigner.image.client import (
    bearer_headers,
    decode_base64_payload,
    guard_provider_call,
    post_to_provider,
)
from redesigner.image.provider_config import ProviderConfig


logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json"

# Edit failures that justify the generate-only attempt.
FALLBACK_KINDS = (ErrorKind.PROVIDER_REJECTED, ErrorKind.EMPTY_RESULT)


class OpenAIImageEdit:
    """Edit/generate adapter for the OpenAI Images API."""

    name = "openai"

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    # ---------------------------------------------------------
    # Request assembly
    # ---------------------------------------------------------

    def _model_fields(self, request: GenerationRequest) -> dict[str, str]:
        model = self.config.openai_image_model
        fields = {
            "model": model,
            "prompt": request.prompt,
            "n": "1",
            "size": self.config.openai_image_size,
        }
        if model.startswith("dall-e"):
            fields["response_format"] = "b64_json"
        elif request.params.output_format:
            fields["output_format"] = request.params.output_format
        return fields

    def build_edit_form(self, request: GenerationRequest) -> tuple[dict[str, str], dict]:
        image = request.image
        files = {"image": (image.filename, image.data, image.mime_type)}
        return self._model_fields(request), files

    def build_generate_body(self, request: GenerationRequest) -> dict:
        body = self._model_fields(request)
        body["n"] = 1
        return body

    def _result_mime(self, request: GenerationRequest) -> str:
        fmt = (request.params.output_format or "png").lower()
        if self.config.openai_image_model.startswith("dall-e"):
            fmt = "png"
        if fmt in ("jpg", "jpeg"):
            return "image/jpeg"
        return f"image/{fmt}"

    # ---------------------------------------------------------
    # Calls
    # ---------------------------------------------------------

    async def adapt(self, request: GenerationRequest) -> GenerationResult:
        result = await guard_provider_call("OpenAI edit", lambda: self._edit(request))
        if not isinstance(result, Failure) or result.kind not in FALLBACK_KINDS:
            return result

        logger.warning(
            "OpenAI edit failed (%s); falling back to prompt-only generation",
            result.kind.value,
        )
        return await guard_provider_call("OpenAI generate", lambda: self._generate(request))

    async def _edit(self, request: GenerationRequest) -> GenerationResult:
        data, files = self.build_edit_form(request)
        response = await post_to_provider(
            self.config.openai_edit_url,
            bearer_headers(self.config.openai_api_key or "", JSON_ACCEPT),
            timeout=self.config.timeout_seconds,
            transport=self.transport,
            data=data,
            files=files,
        )
        return self.parse_response(response, request)

    async def _generate(self, request: GenerationRequest) -> GenerationResult:
        response = await post_to_provider(
            self.config.openai_generate_url,
            bearer_headers(self.config.openai_api_key or "", JSON_ACCEPT),
            timeout=self.config.timeout_seconds,
            transport=self.transport,
            json_body=self.build_generate_body(request),
        )
        return self.parse_response(response, request)

    def parse_response(self, response: httpx.Response, request: GenerationRequest) -> GenerationResult:
        """Extract `data[0].b64_json`; a missing payload is `empty_result`."""
        if not response.is_success:
            logger.warning("OpenAI rejected request: status=%s", response.status_code)
            return Failure(ErrorKind.PROVIDER_REJECTED, response.text)

        try:
            body = response.json()
        except ValueError:
            return Failure(ErrorKind.EMPTY_RESULT, response.text)

        encoded = None
        if isinstance(body, dict):
            items = body.get("data")
            if isinstance(items, list) and items and isinstance(items[0], dict):
                encoded = items[0].get("b64_json")

        image_bytes = decode_base64_payload(encoded)
        if image_bytes is None:
            return Failure(ErrorKind.EMPTY_RESULT, response.text)

        return Success(image_bytes, self._result_mime(request))
