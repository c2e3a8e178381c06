"""Shared provider transport helpers.

Processing flow:
    1. Adapter builds URL, headers, and a multipart or JSON body.
    2. `post_to_provider` submits it with `httpx.AsyncClient` under the
       configured timeout.
    3. Adapter parses the provider-specific response shape.
    4. `guard_provider_call` converts any exception into a `Failure` value so
       nothing escapes an adapter.

Retry behavior:
    None here. The only retry in the pipeline lives in the OpenAI adapter
    (edit -> generate).

Security considerations:
    Authorization headers and image bytes are never logged. Provider response
    bodies are echoed back to callers (truncated by the response encoder).
"""

import base64
import binascii
import logging
from typing import Any, Awaitable, Callable, Protocol

import httpx

from redesigner.core.types import (
    ErrorKind,
    Failure,
    GenerationRequest,
    GenerationResult,
)


logger = logging.getLogger(__name__)


class ImageProvider(Protocol):
    """Capability interface implemented by every provider adapter."""

    async def adapt(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation and return `Success` or `Failure`; never raise."""
        ...


def bearer_headers(api_key: str, accept: str) -> dict[str, str]:
    # Content-Type is left to httpx so multipart boundaries are set correctly.
    return {
        "Authorization": f"Bearer {api_key}",
        "Accept": accept,
    }


async def post_to_provider(
    url: str,
    headers: dict[str, str],
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
    data: dict[str, str] | None = None,
    files: dict[str, tuple[str, bytes, str]] | None = None,
    json_body: dict[str, Any] | None = None,
) -> httpx.Response:
    """Send a single POST to a provider endpoint.

    Args:
        url: Provider endpoint.
        headers: Request headers including `Authorization` and `Accept`.
        timeout: Seconds allowed for each phase (connect, read, write, pool);
            httpx applies it per phase, not as a limit on the whole call.
        transport: Optional httpx transport (tests inject `MockTransport`).
        data: Multipart text fields.
        files: Multipart file fields as `(filename, bytes, mime)` tuples.
        json_body: JSON body for non-multipart calls.

    Returns:
        The response with its body fully read. Status is not checked here.

    Raises:
        httpx.TimeoutException / httpx.RequestError on transport failures.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        if json_body is not None:
            return await client.post(url, headers=headers, json=json_body)
        return await client.post(url, headers=headers, data=data, files=files)


def decode_base64_payload(value: Any) -> bytes | None:
    """Decode a provider base64 artifact; `None` for missing/invalid data."""
    if not isinstance(value, str) or not value:
        return None
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None
    return decoded or None


def content_type_of(response: httpx.Response) -> str:
    """Return the bare media type of a response (no parameters, lowercased)."""
    raw = response.headers.get("content-type", "")
    return raw.split(";", 1)[0].strip().lower()


async def guard_provider_call(
    provider_name: str,
    call: Callable[[], Awaitable[GenerationResult]],
) -> GenerationResult:
    """Run an adapter call and map every exception to a `Failure`.

    Error mapping:
        - `httpx.TimeoutException` -> `timeout`
        - other `httpx.RequestError` -> `network_failure`
        - anything else -> `unexpected` (logged with traceback)
    """
    try:
        return await call()
    except httpx.TimeoutException as exc:
        logger.warning("%s request timed out", provider_name)
        return Failure(ErrorKind.TIMEOUT, f"{provider_name} request timed out: {exc}")
    except httpx.RequestError as exc:
        logger.warning("%s request failed: %s", provider_name, type(exc).__name__)
        return Failure(ErrorKind.NETWORK_FAILURE, f"{provider_name} request failed: {exc}")
    except Exception as exc:
        logger.exception("%s adapter raised unexpectedly", provider_name)
        return Failure(ErrorKind.UNEXPECTED, str(exc) or type(exc).__name__)
