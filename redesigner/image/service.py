"""Image service dispatcher.

Role in pipeline:
    - Receives a normalized `GenerationRequest` from the engine.
    - Selects the provider adapter named by the deployment configuration.
    - Returns the adapter's `GenerationResult` unchanged.

Credential handling:
    A missing key for the active provider short-circuits to
    `missing_credential` before any adapter is constructed, so no network call
    is made.

Error handling strategy:
    Adapters never raise; this layer adds no retry of its own. The
    edit -> generate fallback stays inside the OpenAI adapter.
"""

import logging

import httpx

from redesigner.core.types import ErrorKind, Failure, GenerationRequest, GenerationResult
from redesigner.image.client import ImageProvider
from redesigner.image.openai_client import OpenAIImageEdit
from redesigner.image.provider_config import (
    PROVIDER_OPENAI,
    PROVIDER_STABILITY,
    ProviderConfig,
)
from redesigner.image.stability_client import StabilityImageToImage


logger = logging.getLogger(__name__)

ADAPTERS = {
    PROVIDER_STABILITY: StabilityImageToImage,
    PROVIDER_OPENAI: OpenAIImageEdit,
}


def missing_credential(config: ProviderConfig) -> Failure:
    return Failure(
        ErrorKind.MISSING_CREDENTIAL,
        f"API key for image provider '{config.provider}' is not configured",
    )


def build_provider(
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ImageProvider:
    """Instantiate the adapter for `config.provider`.

    Raises:
        ValueError: Unknown provider name.
    """
    adapter_cls = ADAPTERS.get(config.provider)
    if adapter_cls is None:
        raise ValueError(f"Unknown image provider: {config.provider}")
    return adapter_cls(config, transport=transport)


async def dispatch(
    request: GenerationRequest,
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GenerationResult:
    """Generate a redesign through the configured provider.

    Args:
        request: Normalized request (image, params, prompt).
        config: Deployment configuration with credentials.
        transport: Optional httpx transport forwarded to the adapter.

    Returns:
        `Success` or `Failure` exactly as produced by the adapter.
    """
    if not config.api_key():
        logger.warning("Image provider '%s' has no API key configured", config.provider)
        return missing_credential(config)

    provider = build_provider(config, transport=transport)
    logger.info("Dispatching redesign to provider=%s", config.provider)
    return await provider.adapt(request)
