"""Gemini Image Relay: FastAPI Application.

This module is the single entry point for the relay server.  It defines the
FastAPI ``app`` instance, the relay route, the static site mount, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The application is a stateless pass-through:

- **Configuration** is read once from the environment by
  :data:`~imagerelay.core.config.config`.  A missing ``GEMINI_API_KEY`` is
  fatal: ``main()`` exits before uvicorn starts, and the lifespan refuses to
  start when the app is served by another launcher.
- **Forwarding** is performed by :class:`~imagerelay.core.relay.GeminiRelay`
  over one ``httpx.AsyncClient`` owned by the lifespan.
- **Static assets** (the prebuilt browser client) are served at the site root
  by FastAPI's ``StaticFiles`` with ``html=True``.

Endpoints
---------
========  ==============  ==========================================
Method    Path            Purpose
========  ==============  ==========================================
POST      ``/generate``   Relay a JSON payload to Gemini
GET       ``/...``        Static frontend assets (``index.html`` at /)
========  ==============  ==========================================

Usage
-----
CLI (installed entry point)::

    imagerelay

Direct invocation::

    python -m imagerelay.api.main
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from imagerelay import __version__
from imagerelay.api.payload import PayloadError, read_json_payload
from imagerelay.core.config import MissingCredentialError, RelayConfig, config, require_api_key
from imagerelay.core.relay import GeminiRelay, RelayResult

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

INTERNAL_ERROR_MESSAGE = "An internal server error occurred on the proxy."


def error_body(message: str) -> dict[str, dict[str, str]]:
    """Build the ``{"error": {"message": ...}}`` body used for relay-side errors."""
    return {"error": {"message": message}}


# ---------------------------------------------------------------------------
# Application lifecycle: credential check and HTTP client setup/teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Validates the credential and stores a :class:`GeminiRelay` backed by
        a fresh ``httpx.AsyncClient`` on ``app.state.relay``.

    On shutdown:
        Closes the HTTP client and its connection pool.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.

    Raises:
        MissingCredentialError: If ``GEMINI_API_KEY`` is not configured.
            uvicorn aborts startup before binding its socket.
    """
    settings: RelayConfig = app.state.settings

    # --- Startup -----------------------------------------------------------
    try:
        api_key = require_api_key(settings)
    except MissingCredentialError as exc:
        logger.critical("FATAL ERROR: %s", exc)
        raise

    http_client = httpx.AsyncClient(timeout=settings.upstream_timeout)
    app.state.relay = GeminiRelay(
        http_client,
        api_key,
        base_url=settings.gemini_base_url,
        model=settings.gemini_model,
    )
    logger.info("Relay ready (model=%s).", settings.gemini_model)

    try:
        yield  # Application runs here.
    finally:
        # --- Shutdown ------------------------------------------------------
        await http_client.aclose()
        logger.info("Upstream HTTP client closed on shutdown.")


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------

router = APIRouter()


def render_result(result: RelayResult) -> Response:
    """Turn a :class:`RelayResult` into the response sent to the caller.

    JSON bodies are re-serialised as JSON, raw text bodies are sent as
    ``text/plain``; the upstream status code is kept in both cases.
    """
    if result.is_json:
        return JSONResponse(content=result.body, status_code=result.status_code)
    return PlainTextResponse(content=result.body, status_code=result.status_code)


@router.post("/generate")
async def generate(request: Request) -> Response:
    """Relay a JSON payload to the Gemini ``generateContent`` endpoint.

    This endpoint:

    1. Reads the inbound body (413 if too large, 400 if malformed).
    2. Forwards it unchanged to the upstream model endpoint.
    3. Writes the upstream status and body back: JSON when the upstream
       body parses as JSON, raw text for unparseable error bodies.

    Any exception raised while forwarding (connection failures, a success
    body that is not JSON, ...) is logged and answered with a uniform 500.

    Args:
        request: The incoming request; its body is treated as opaque JSON.

    Returns:
        The upstream response, or a relay-side error response.
    """
    settings: RelayConfig = request.app.state.settings
    try:
        payload = await read_json_payload(request, settings.max_body_bytes)
    except PayloadError as exc:
        logger.warning("Rejected inbound payload (%s): %s", exc.status_code, exc.message)
        return JSONResponse(content=error_body(exc.message), status_code=exc.status_code)

    relay: GeminiRelay = request.app.state.relay
    try:
        result = await relay.forward(payload)
        return render_result(result)
    except Exception:
        logger.exception("Internal error while relaying to %s", relay.endpoint_url())
        return JSONResponse(content=error_body(INTERNAL_ERROR_MESSAGE), status_code=500)


# ---------------------------------------------------------------------------
# FastAPI application factory and module-level instance.
# ---------------------------------------------------------------------------


def create_app(settings: RelayConfig | None = None) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Configuration to use.  Defaults to the global
            :data:`~imagerelay.core.config.config` instance.

    Returns:
        A FastAPI application with CORS enabled, the relay route registered,
        and the static site mounted at ``/`` when ``static_dir`` exists.
    """
    if settings is None:
        settings = config

    app = FastAPI(
        title="Gemini Image Relay",
        description="Pass-through proxy from the browser client to the Gemini image API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # The browser client may be served from another origin during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Mounted last so that ``/generate`` is matched before the catch-all.
    static_dir = settings.static_dir
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.warning("Static directory %s not found; serving the API only.", static_dir)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Configures logging, then checks ``GEMINI_API_KEY``.  When it is missing
    the process logs a fatal error and exits with status 1 without binding
    any socket.  Otherwise the server listens on
    ``config.host:config.port`` (``0.0.0.0:3000`` by default).

    This function is registered as the ``imagerelay`` console script in
    ``pyproject.toml``.
    """
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    try:
        require_api_key(config)
    except MissingCredentialError as exc:
        logger.critical("FATAL ERROR: %s", exc)
        sys.exit(1)

    import uvicorn

    logger.info("Backend server starting on port %s", config.port)
    uvicorn.run(
        "imagerelay.api.main:app",
        host=config.host,
        port=config.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
