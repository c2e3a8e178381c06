"""
Inbound request normalization for the redesign endpoint.

Architectural role:
- Extract one `UploadedImage` and a `StyleParameters` set from an HTTP request.
- Accept multipart uploads and JSON bodies carrying a base64 data URL.
- Raise `InputError` for unusable requests; never call a provider.

Processing lifecycle:
1. Pick the encoding (pinned by configuration or chosen by `Content-Type`).
2. Locate the image under the ordered field names `image`, `photo`, `file`,
   `init_image`; multipart falls back to the first file field present.
3. Pre-validate payload size before decode/read completes.
4. Collect recognized text fields (first element for repeated fields).

Error handling strategy:
- No image found, or an image field with zero bytes (empty upload or empty
  data URL payload) -> `missing_image`.
- Malformed data URL, bad JSON, unsupported content type, oversize payload
  -> `invalid_input`.

Side effects:
- Multipart files are spooled by the framework (memory, then a temporary
  file). Form handles are closed in `finally`, on every exit path; removal of
  the spooled temporary file is left to the runtime.
"""

import base64
import binascii
from typing import Any, Iterable, Mapping

from fastapi import Request

from redesigner.core.types import (
    ErrorKind,
    InputError,
    StyleParameters,
    UploadedImage,
)
from redesigner.image.provider_config import ProviderConfig


# ============================================================
# FIELD NAMES
# ============================================================

IMAGE_FIELDS = ("image", "photo", "file", "init_image")
JSON_IMAGE_FIELDS = IMAGE_FIELDS + ("image_base64", "imageBase64")

# Inbound name -> StyleParameters attribute. Earlier names win on conflict.
STYLE_FIELDS = (
    ("prompt", "prompt"),
    ("style", "style"),
    ("roomType", "room_type"),
    ("room_type", "room_type"),
    ("length", "length"),
    ("width", "width"),
    ("height", "height"),
    ("budget", "budget"),
    ("wishes", "wishes"),
    ("image_strength", "image_strength"),
    ("strength", "image_strength"),
    ("cfg_scale", "cfg_scale"),
    ("seed", "seed"),
    ("steps", "steps"),
    ("style_preset", "style_preset"),
    ("output_format", "output_format"),
)


def _invalid(message: str) -> InputError:
    return InputError(ErrorKind.INVALID_INPUT, message)


def _missing(message: str = "No image found in request") -> InputError:
    return InputError(ErrorKind.MISSING_IMAGE, message)


# ============================================================
# FIELD HELPERS
# ============================================================

def first_value(value: Any) -> Any:
    """Collapse repeated values (lists/tuples) to their first element."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def collect_style_fields(fields: Mapping[str, Any]) -> StyleParameters:
    """Build `StyleParameters` from recognized inbound fields.

    Non-scalar values (objects) and blank strings are treated as absent.
    """
    values: dict[str, str] = {}
    for inbound, attr in STYLE_FIELDS:
        if attr in values or inbound not in fields:
            continue
        value = first_value(fields[inbound])
        if value is None or isinstance(value, (dict, list, tuple, bytes)):
            continue
        text = str(value).strip()
        if text:
            values[attr] = text
    return StyleParameters(**values)


def pick_upload(items: Iterable[tuple[str, Any]]) -> Any:
    """Choose the uploaded file from multipart `(name, value)` items.

    Text values are `str`; anything else is a file. Recognized names are tried
    in `IMAGE_FIELDS` order, then the first file of any name.

    Returns:
        The chosen file object, or `None` when the form carries no file.
    """
    files: dict[str, Any] = {}
    for name, value in items:
        if isinstance(value, str):
            continue
        files.setdefault(name, value)

    for name in IMAGE_FIELDS:
        if name in files:
            return files[name]
    return next(iter(files.values()), None)


# ============================================================
# DATA URL
# ============================================================

def _approx_decoded_size(encoded: str) -> int:
    padding = 0
    if encoded.endswith("=="):
        padding = 2
    elif encoded.endswith("="):
        padding = 1
    return (len(encoded) * 3) // 4 - padding


def parse_data_url(value: str, max_bytes: int | None = None) -> tuple[str, bytes]:
    """
    Strictly parse `data:<mime>;base64,<payload>`.

    Validation behavior:
    - Requires the `data:` scheme, a comma, a non-empty mime type, the
      `base64` marker, and a valid base64 payload.
    - An empty payload is `missing_image`, the same kind an empty multipart
      file gets.
    - Applies an approximate decoded-size check before decoding.

    Returns:
        `(mime_type, decoded_bytes)`.
    """
    if not isinstance(value, str) or not value.startswith("data:"):
        raise _invalid("Image must be a data URL")

    header, sep, payload = value[len("data:"):].partition(",")
    if not sep:
        raise _invalid("Malformed data URL: missing comma")

    parts = [p.strip() for p in header.split(";")]
    mime_type = parts[0]
    if not mime_type:
        raise _invalid("Malformed data URL: missing mime type")
    if "base64" not in (p.lower() for p in parts[1:]):
        raise _invalid("Malformed data URL: missing base64 marker")

    payload = "".join(payload.split())
    if not payload:
        raise _missing("Data URL carries no image bytes")

    if max_bytes is not None and _approx_decoded_size(payload) > max_bytes:
        raise _invalid("File exceeds max size limit")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise _invalid("Malformed data URL: payload is not valid base64")

    return mime_type, data


# ============================================================
# ENCODING-SPECIFIC EXTRACTION
# ============================================================

async def normalize_multipart(request: Request, max_bytes: int) -> tuple[UploadedImage, StyleParameters]:
    """Extract image and fields from a multipart form body."""
    try:
        form = await request.form()
    except Exception as exc:
        raise _invalid(f"Malformed multipart body: {exc}")

    try:
        upload = pick_upload(form.multi_items())
        if upload is None:
            raise _missing()

        # Read one byte past the limit to detect oversize uploads without
        # buffering arbitrarily large files.
        data = await upload.read(max_bytes + 1)
        if len(data) > max_bytes:
            raise _invalid("File exceeds max size limit")
        if not data:
            raise _missing("Uploaded file is empty")

        fields = {}
        for name, value in form.multi_items():
            if isinstance(value, str):
                fields.setdefault(name, value)

        image = UploadedImage(
            data=data,
            mime_type=upload.content_type or "",
            filename=upload.filename or "",
        )
        return image, collect_style_fields(fields)
    finally:
        await form.close()


async def normalize_json(request: Request, max_bytes: int) -> tuple[UploadedImage, StyleParameters]:
    """Extract image and fields from a JSON body with a data URL."""
    try:
        body = await request.json()
    except ValueError:
        raise _invalid("Request body is not valid JSON")

    if not isinstance(body, dict):
        raise _invalid("JSON body must be an object")

    raw = None
    for name in JSON_IMAGE_FIELDS:
        raw = first_value(body.get(name))
        if raw not in (None, ""):
            break
    if raw in (None, ""):
        raise _missing()

    mime_type, data = parse_data_url(raw, max_bytes)
    if not data:
        raise _missing("Decoded image is empty")

    filename = first_value(body.get("filename"))
    image = UploadedImage(
        data=data,
        mime_type=mime_type,
        filename=filename if isinstance(filename, str) else "",
    )
    return image, collect_style_fields(body)


# ============================================================
# PUBLIC ENTRYPOINT
# ============================================================

def detect_encoding(content_type: str, pinned: str = "auto") -> str:
    """Map a `Content-Type` header to `multipart` or `json`.

    Raises `InputError` when the type is unsupported or differs from the
    deployment's pinned encoding.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "multipart/form-data":
        encoding = "multipart"
    elif media_type == "application/json" or media_type.endswith("+json"):
        encoding = "json"
    else:
        raise _invalid(f"Unsupported content type: {media_type or 'none'}")

    if pinned != "auto" and encoding != pinned:
        raise _invalid(f"This endpoint accepts {pinned} requests only")
    return encoding


async def normalize_request(request: Request, config: ProviderConfig) -> tuple[UploadedImage, StyleParameters]:
    """
    Produce `(UploadedImage, StyleParameters)` from an inbound request.

    Raises:
        InputError: `invalid_input` or `missing_image`.
    """
    encoding = detect_encoding(request.headers.get("content-type", ""), config.input_encoding)
    if encoding == "multipart":
        return await normalize_multipart(request, config.max_upload_bytes)
    return await normalize_json(request, config.max_upload_bytes)
