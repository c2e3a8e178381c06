"""
HTTP API adapter for the room redesign pipeline.

Architectural role:
- Expose `POST /api/redesign`.
- Enforce method and credential checks before touching the body.
- Delegate normalization, generation, and encoding to their modules.

API request lifecycle (`/api/redesign`):
1. Reject any method other than POST with 405 and `Allow: POST` (the router
   raises, the app-level HTTP exception handler encodes).
2. Fail fast with `missing_credential` when the active provider has no key.
3. Normalize the body into `(UploadedImage, StyleParameters)`.
4. Run `process_redesign` (prompt + dispatch).
5. Encode the result as a JSON envelope or raw image bytes.

Error handling strategy:
- Input problems (`InputError`) become 400 responses.
- Provider problems arrive as `Failure` values and are encoded by kind.
- Anything else is logged and returned as `unexpected` (500); exceptions never
  escape the handler.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Builds the module-level `app` from the process environment.
"""

from dotenv import load_dotenv

load_dotenv()

import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from redesigner.api.multimodal.input_normalizer import normalize_request
from redesigner.api.response_encoder import encode_failure, encode_result, method_not_allowed
from redesigner.core.engine import process_redesign
from redesigner.core.types import ErrorKind, Failure, InputError
from redesigner.image.provider_config import ProviderConfig, load_config
from redesigner.image.service import missing_credential


logger = logging.getLogger(__name__)

REDESIGN_PATH = "/api/redesign"

ROUTED_METHODS = ["POST"]


def create_app(
    config: ProviderConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the redesign service.

    Args:
        config: Deployment configuration; read from the environment when omitted.
        transport: Optional httpx transport for outbound provider calls.
    """
    config = config or load_config()
    app = FastAPI(title="Room Redesign API")
    app.state.config = config
    app.state.transport = transport

    @app.exception_handler(StarletteHTTPException)
    async def redesign_method_guard(request: Request, exc: StarletteHTTPException) -> Response:
        # The router raises 405 for every method outside ROUTED_METHODS,
        # including ones no route lists (TRACE, PROPFIND).
        if exc.status_code == 405 and request.url.path == REDESIGN_PATH:
            return method_not_allowed()
        return await http_exception_handler(request, exc)

    @app.api_route(REDESIGN_PATH, methods=ROUTED_METHODS)
    async def redesign(request: Request) -> Response:
        cfg: ProviderConfig = request.app.state.config
        try:
            if not cfg.api_key():
                logger.warning("Rejecting request: provider '%s' has no API key", cfg.provider)
                return encode_failure(missing_credential(cfg), cfg.details_max_chars)

            try:
                image, params = await normalize_request(request, cfg)
            except InputError as exc:
                logger.info("Rejected redesign input: %s (%s)", exc.kind.value, exc.message)
                return encode_failure(Failure(exc.kind, exc.message), cfg.details_max_chars)

            result = await process_redesign(
                image,
                params,
                cfg,
                transport=request.app.state.transport,
            )
            return encode_result(result, cfg.response_mode, cfg.details_max_chars)

        except Exception as exc:
            logger.exception("Unhandled error in redesign handler")
            return encode_failure(
                Failure(ErrorKind.UNEXPECTED, str(exc) or type(exc).__name__),
                cfg.details_max_chars,
            )

    return app


app = create_app()
