"""Request and result data contracts for the redesign pipeline.

Architectural role:
    Defines the shapes passed between the input normalizer, prompt builder,
    dispatcher, provider adapters, and response encoder.

Lifecycle:
    Every object here is request-scoped and immutable once constructed. Nothing
    is cached or shared across requests.

Result model:
    Provider adapters return exactly one of `Success` or `Failure`. Callers
    branch on `isinstance` rather than on partially populated fields.
"""

import uuid
import mimetypes
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Union


DEFAULT_MIME_TYPE = "image/jpeg"


class ErrorKind(str, Enum):
    """Normalized failure categories surfaced to callers."""

    INVALID_INPUT = "invalid_input"
    MISSING_IMAGE = "missing_image"
    MISSING_CREDENTIAL = "missing_credential"
    PROVIDER_REJECTED = "provider_rejected"
    EMPTY_RESULT = "empty_result"
    TIMEOUT = "timeout"
    NETWORK_FAILURE = "network_failure"
    UNEXPECTED = "unexpected"


class InputError(Exception):
    """Raised by input normalization when a request cannot be used.

    Only `ErrorKind.INVALID_INPUT` and `ErrorKind.MISSING_IMAGE` are raised this
    way; provider-side problems travel as `Failure` values instead.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def _generated_filename(mime_type: str) -> str:
    ext = IMAGE_EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ".jpg"
    return f"upload-{uuid.uuid4().hex[:12]}{ext}"


@dataclass(frozen=True)
class UploadedImage:
    """Source photograph supplied by the caller.

    Attributes:
        data: Raw image bytes. Must be non-empty.
        mime_type: Declared content type; `image/jpeg` when not supplied.
        filename: Original filename, or a generated one when not supplied.
    """

    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE
    filename: str = ""

    def __post_init__(self):
        if not self.data:
            raise InputError(ErrorKind.MISSING_IMAGE, "Uploaded image is empty")
        if not self.mime_type:
            object.__setattr__(self, "mime_type", DEFAULT_MIME_TYPE)
        if not self.filename:
            object.__setattr__(self, "filename", _generated_filename(self.mime_type))


@dataclass(frozen=True)
class StyleParameters:
    """Optional styling fields and provider tuning knobs.

    Every field is either a non-blank, stripped string or `None`. Absent
    fields are left out of prompts and provider requests entirely.
    """

    style: str | None = None
    room_type: str | None = None
    length: str | None = None
    width: str | None = None
    height: str | None = None
    budget: str | None = None
    wishes: str | None = None
    prompt: str | None = None

    image_strength: str | None = None
    cfg_scale: str | None = None
    seed: str | None = None
    steps: str | None = None
    style_preset: str | None = None
    output_format: str | None = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            text = str(value).strip()
            object.__setattr__(self, f.name, text or None)

    @property
    def has_dimensions(self) -> bool:
        return bool(self.length and self.width and self.height)

    def present(self) -> dict[str, str]:
        """Return only the fields that carry a value."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class GenerationRequest:
    """Provider-agnostic bundle handed to the dispatcher."""

    image: UploadedImage
    params: StyleParameters = field(default_factory=StyleParameters)
    prompt: str = ""


@dataclass(frozen=True)
class Success:
    image_bytes: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    provider_message: str = ""


GenerationResult = Union[Success, Failure]
