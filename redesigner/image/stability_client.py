"""Stability AI image-to-image adapter.

Processing flow:
    1. Build multipart form: source image under the configured field
       (`init_image` by default), prompt, strength, output format, and any
       tuning knobs present on the request.
    2. POST with `Accept` from configuration (`image/png` by default).
    3. Non-2xx -> `provider_rejected` with the body text.
    4. 2xx JSON body -> decode `artifacts[0].base64` (v1) or `image` (v2beta).
       2xx image body -> raw bytes with the declared content type.

Size validation:
    Tuning knobs (`image_strength` 0-1, `cfg_scale`, `steps`, `seed`) are
    forwarded as provided. The provider rejects out-of-range values.
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
    content_type_of,
    decode_base64_payload,
    guard_provider_call,
    post_to_provider,
)
from redesigner.image.provider_config import ProviderConfig


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "png"
DEFAULT_RESULT_MIME = "image/png"

# Optional knobs copied verbatim from the request when present.
PASSTHROUGH_FIELDS = ("cfg_scale", "seed", "steps", "style_preset")


def _mime_for_format(output_format: str) -> str:
    fmt = output_format.lower()
    if fmt in ("jpg", "jpeg"):
        return "image/jpeg"
    return f"image/{fmt}"


class StabilityImageToImage:
    """Image-to-image adapter for the Stability generation API."""

    name = "stability"

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    def build_form(self, request: GenerationRequest) -> tuple[dict[str, str], dict]:
        """Return `(data, files)` for the multipart body."""
        params = request.params
        image = request.image

        data = {
            "image_strength": params.image_strength or self.config.default_image_strength,
            "output_format": params.output_format or DEFAULT_OUTPUT_FORMAT,
        }
        if request.prompt:
            data["prompt"] = request.prompt
        for name in PASSTHROUGH_FIELDS:
            value = getattr(params, name)
            if value is not None:
                data[name] = value

        files = {
            self.config.stability_image_field: (image.filename, image.data, image.mime_type),
        }
        return data, files

    async def adapt(self, request: GenerationRequest) -> GenerationResult:
        return await guard_provider_call("Stability", lambda: self._generate(request))

    async def _generate(self, request: GenerationRequest) -> GenerationResult:
        data, files = self.build_form(request)
        headers = bearer_headers(self.config.stability_api_key or "", self.config.stability_accept)

        response = await post_to_provider(
            self.config.stability_url,
            headers,
            timeout=self.config.timeout_seconds,
            transport=self.transport,
            data=data,
            files=files,
        )

        if not response.is_success:
            logger.warning("Stability rejected request: status=%s", response.status_code)
            return Failure(ErrorKind.PROVIDER_REJECTED, response.text)

        return self.parse_response(response, data["output_format"])

    def parse_response(self, response: httpx.Response, output_format: str) -> GenerationResult:
        """Normalize either success shape into `Success`, else `empty_result`."""
        media_type = content_type_of(response)

        if media_type == "application/json" or media_type.endswith("+json"):
            return self._parse_json_envelope(response, output_format)

        if not response.content:
            return Failure(ErrorKind.EMPTY_RESULT, "Stability returned an empty body")

        if media_type and not media_type.startswith("image/"):
            return Failure(ErrorKind.EMPTY_RESULT, response.text)

        return Success(response.content, media_type or DEFAULT_RESULT_MIME)

    def _parse_json_envelope(self, response: httpx.Response, output_format: str) -> GenerationResult:
        try:
            body = response.json()
        except ValueError:
            return Failure(ErrorKind.EMPTY_RESULT, response.text)

        encoded = None
        if isinstance(body, dict):
            artifacts = body.get("artifacts")
            if isinstance(artifacts, list) and artifacts and isinstance(artifacts[0], dict):
                encoded = artifacts[0].get("base64")
            if encoded is None:
                encoded = body.get("image")

        image_bytes = decode_base64_payload(encoded)
        if image_bytes is None:
            return Failure(ErrorKind.EMPTY_RESULT, response.text)

        return Success(image_bytes, _mime_for_format(output_format))
