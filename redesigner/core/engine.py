"""Core request orchestration for one redesign.

Architectural role:
    Shared entrypoint for the HTTP adapter and the CLI. Turns an already
    normalized image and parameter set into a `GenerationResult`.

Control-flow model:
    1. Resolve the prompt (explicit `prompt` field, else rendered template).
    2. Build the immutable `GenerationRequest`.
    3. Dispatch to the configured provider adapter.

Error handling strategy:
    Nothing raised below this point is expected; adapters convert failures to
    values. As a last guard, any exception is logged and returned as an
    `unexpected` failure so a single bad request never crashes the caller.
"""

import logging

import httpx

from redesigner.core.types import (
    ErrorKind,
    Failure,
    GenerationRequest,
    GenerationResult,
    StyleParameters,
    UploadedImage,
)
from redesigner.image.provider_config import ProviderConfig
from redesigner.image.service import dispatch
from redesigner.prompting.prompt_builder import resolve_prompt


logger = logging.getLogger(__name__)


def build_generation_request(image: UploadedImage, params: StyleParameters) -> GenerationRequest:
    return GenerationRequest(image=image, params=params, prompt=resolve_prompt(params))


async def process_redesign(
    image: UploadedImage,
    params: StyleParameters,
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GenerationResult:
    """Run prompt resolution and dispatch for one request.

    Args:
        image: Source photograph.
        params: Normalized styling fields.
        config: Deployment configuration.
        transport: Optional httpx transport forwarded to the adapter.

    Returns:
        `Success` or `Failure`; never raises.
    """
    try:
        request = build_generation_request(image, params)
        logger.debug(
            "Redesign request: fields=%s image_bytes=%d mime=%s",
            sorted(params.present()),
            len(image.data),
            image.mime_type,
        )
        return await dispatch(request, config, transport=transport)
    except Exception as exc:
        logger.exception("Redesign processing failed")
        return Failure(ErrorKind.UNEXPECTED, str(exc) or type(exc).__name__)
