"""Provider/runtime configuration for the redesign pipeline.

Architectural role:
    Centralizes provider selection, endpoints, credentials, and response shaping
    options. The resulting `ProviderConfig` is built once at process start and
    passed explicitly to the HTTP adapter, engine, dispatcher, and adapters.
    Nothing downstream reads the environment mid-request.

Relevant environment variables:
    - `IMAGE_PROVIDER` (`stability` | `openai`)
    - `STABILITY_API_KEY` (legacy alias `STABILITY_KEY`), `STABILITY_ENGINE`,
      `STABILITY_API_HOST`, `STABILITY_IMAGE_FIELD`, `STABILITY_ACCEPT`,
      `DEFAULT_IMAGE_STRENGTH`
    - `OPENAI_API_KEY`, `OPENAI_API_BASE`, `OPENAI_IMAGE_MODEL`,
      `OPENAI_IMAGE_SIZE`
    - `IMAGE_TIMEOUT_SECONDS`, `RESPONSE_MODE`, `INPUT_ENCODING`,
      `MAX_UPLOAD_MB`, `DETAILS_MAX_CHARS`

Failure behavior:
    Missing key material is represented as `None`; the dispatcher turns it
    into a `missing_credential` failure per request. Unknown enum-like values
    raise `ValueError` at load time.
"""

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()


PROVIDER_STABILITY = "stability"
PROVIDER_OPENAI = "openai"
IMAGE_PROVIDERS = (PROVIDER_STABILITY, PROVIDER_OPENAI)

RESPONSE_MODES = ("json", "binary")
INPUT_ENCODINGS = ("auto", "multipart", "json")


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable deployment configuration.

    Only one provider family is active per deployment; the other family's
    settings are carried but unused.
    """

    provider: str = PROVIDER_STABILITY

    stability_api_key: str | None = None
    stability_engine: str = "stable-image-core-v1-1"
    stability_api_host: str = "https://api.stability.ai"
    stability_image_field: str = "init_image"
    stability_accept: str = "image/png"
    default_image_strength: str = "0.35"

    openai_api_key: str | None = None
    openai_api_base: str = "https://api.openai.com/v1"
    openai_image_model: str = "gpt-image-1"
    openai_image_size: str = "1024x1024"

    timeout_seconds: float = 120.0
    response_mode: str = "json"
    input_encoding: str = "auto"
    max_upload_bytes: int = 10 * 1024 * 1024
    details_max_chars: int = 2000

    def __post_init__(self):
        if self.provider not in IMAGE_PROVIDERS:
            raise ValueError(f"Unknown image provider: {self.provider}")
        if self.response_mode not in RESPONSE_MODES:
            raise ValueError(f"Unknown response mode: {self.response_mode}")
        if self.input_encoding not in INPUT_ENCODINGS:
            raise ValueError(f"Unknown input encoding: {self.input_encoding}")

    @property
    def stability_url(self) -> str:
        host = self.stability_api_host.rstrip("/")
        return f"{host}/v1/generation/{self.stability_engine}/image-to-image"

    @property
    def openai_edit_url(self) -> str:
        return f"{self.openai_api_base.rstrip('/')}/images/edits"

    @property
    def openai_generate_url(self) -> str:
        return f"{self.openai_api_base.rstrip('/')}/images/generations"

    def api_key(self) -> str | None:
        """Return the key required by the active provider, or `None`."""
        if self.provider == PROVIDER_OPENAI:
            return self.openai_api_key
        return self.stability_api_key


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(environ: Mapping[str, str] | None = None) -> ProviderConfig:
    """Build a `ProviderConfig` from environment variables.

    Args:
        environ: Mapping to read from; defaults to `os.environ` (after
            `.env` loading at import time).

    Returns:
        Frozen configuration object.

    Raises:
        ValueError: Unknown provider/mode/encoding, or non-numeric numeric
            settings.
    """
    env = os.environ if environ is None else environ

    def get(name: str, default: str) -> str:
        return _clean(env.get(name)) or default

    max_upload_mb = float(get("MAX_UPLOAD_MB", "10"))

    return ProviderConfig(
        provider=get("IMAGE_PROVIDER", PROVIDER_STABILITY).lower(),
        stability_api_key=_clean(env.get("STABILITY_API_KEY")) or _clean(env.get("STABILITY_KEY")),
        stability_engine=get("STABILITY_ENGINE", "stable-image-core-v1-1"),
        stability_api_host=get("STABILITY_API_HOST", "https://api.stability.ai"),
        stability_image_field=get("STABILITY_IMAGE_FIELD", "init_image"),
        stability_accept=get("STABILITY_ACCEPT", "image/png"),
        default_image_strength=get("DEFAULT_IMAGE_STRENGTH", "0.35"),
        openai_api_key=_clean(env.get("OPENAI_API_KEY")),
        openai_api_base=get("OPENAI_API_BASE", "https://api.openai.com/v1"),
        openai_image_model=get("OPENAI_IMAGE_MODEL", "gpt-image-1"),
        openai_image_size=get("OPENAI_IMAGE_SIZE", "1024x1024"),
        timeout_seconds=float(get("IMAGE_TIMEOUT_SECONDS", "120")),
        response_mode=get("RESPONSE_MODE", "json").lower(),
        input_encoding=get("INPUT_ENCODING", "auto").lower(),
        max_upload_bytes=int(max_upload_mb * 1024 * 1024),
        details_max_chars=int(get("DETAILS_MAX_CHARS", "2000")),
    )
