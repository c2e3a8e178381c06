"""Caller-facing response shaping.

Response formatting:
- Success, `json` mode: `{"ok": true, "image": "data:<mime>;base64,<payload>"}`.
- Success, `binary` mode: raw bytes with the image content type and
  `Cache-Control: no-store`.
- Failure: always JSON `{"ok": false, "error": <kind>, "details": <text>}`
  with a status chosen per error kind. Details are truncated.
"""

import base64

from fastapi.responses import JSONResponse, Response

from redesigner.core.types import ErrorKind, Failure, GenerationResult, Success


STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.MISSING_IMAGE: 400,
    ErrorKind.MISSING_CREDENTIAL: 500,
    ErrorKind.PROVIDER_REJECTED: 502,
    ErrorKind.EMPTY_RESULT: 500,
    ErrorKind.TIMEOUT: 502,
    ErrorKind.NETWORK_FAILURE: 502,
    ErrorKind.UNEXPECTED: 500,
}

TRUNCATION_MARKER = "...[truncated]"


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def truncate_details(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def encode_failure(failure: Failure, details_max_chars: int = 2000, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or STATUS_BY_KIND.get(failure.kind, 500),
        content={
            "ok": False,
            "error": failure.kind.value,
            "details": truncate_details(failure.provider_message or "", details_max_chars),
        },
    )


def encode_result(result: GenerationResult, mode: str = "json", details_max_chars: int = 2000) -> Response:
    """Convert a `GenerationResult` into an HTTP response.

    Args:
        result: Adapter outcome.
        mode: `json` for the data-URL envelope, `binary` for raw bytes.
        details_max_chars: Upper bound for failure diagnostic text.
    """
    if isinstance(result, Success):
        if mode == "binary":
            return Response(
                content=result.image_bytes,
                media_type=result.mime_type,
                headers={"Cache-Control": "no-store"},
            )
        return JSONResponse(
            status_code=200,
            content={"ok": True, "image": to_data_url(result.image_bytes, result.mime_type)},
        )

    return encode_failure(result, details_max_chars)


def method_not_allowed() -> JSONResponse:
    response = encode_failure(
        Failure(ErrorKind.INVALID_INPUT, "Method not allowed"),
        status_code=405,
    )
    response.headers["Allow"] = "POST"
    return response
