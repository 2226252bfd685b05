"""Configuration management for the Gemini Image Relay.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables (no prefix), allowing the
relay to be deployed with the same ``.env`` file as the browser client it serves.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (``GEMINI_API_KEY``, ``PORT``, ...)
2. .env file in the working directory
3. Default values defined in RelayConfig

Example .env file:
    GEMINI_API_KEY=AIza...
    PORT=3000
    GEMINI_MODEL=gemini-2.5-flash-image-preview

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The credential is optional at this level and importing the package never
fails on it; :func:`require_api_key` is the startup gate that turns a
missing credential into a fatal error.

Usage Example
-------------
    from imagerelay.core.config import config, require_api_key

    api_key = require_api_key(config)
    print(config.port)
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Model identifier interpolated into the upstream path.
DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

# Project root: src/imagerelay/core/config.py -> four levels up.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class MissingCredentialError(RuntimeError):
    """Raised at startup when ``GEMINI_API_KEY`` is not configured."""


class RelayConfig(BaseSettings):
    """Main configuration for the Gemini Image Relay.

    Attributes
    ----------
    Upstream:
        gemini_api_key : str | None
            Credential appended to every upstream call as the ``key`` query
            parameter.  Required at startup.
        gemini_base_url : str
            Scheme and host of the upstream API.
        gemini_model : str
            Model identifier interpolated into the upstream path.
        upstream_timeout : float
            httpx timeout for the upstream call, in seconds.

    Inbound:
        max_body_bytes : int
            Largest accepted ``POST /generate`` body (embedded image data).

    Server:
        host : str
            Bind address (0.0.0.0 for all interfaces)
        port : int
            Listen port
        static_dir : Path
            Directory of prebuilt frontend assets served at ``/``
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            Root log level configured by the ``imagerelay`` entry point

    Examples
    --------
        >>> cfg = RelayConfig(gemini_api_key="test-key", port=8080, _env_file=None)
        >>> cfg.port
        8080
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream settings
    gemini_api_key: str | None = Field(
        default=None,
        description="Gemini API key (required; the process exits if unset)",
    )
    gemini_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Scheme and host of the upstream generative-image API",
    )
    gemini_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model identifier used in the generateContent path",
    )
    upstream_timeout: float = Field(
        default=300.0,
        description="Upstream request timeout in seconds",
        gt=0,
    )

    # Inbound settings
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of an inbound JSON payload",
        ge=1,
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for all interfaces)",
    )
    port: int = Field(
        default=3000,
        description="Server port",
        ge=1,
        le=65535,
    )
    static_dir: Path = Field(
        default=_PROJECT_ROOT / "docs",
        description="Directory of prebuilt frontend assets served at the site root",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level",
    )


def require_api_key(settings: RelayConfig) -> str:
    """Return the configured credential or raise :class:`MissingCredentialError`.

    An empty ``GEMINI_API_KEY=`` line in a ``.env`` file counts as missing.

    Args:
        settings: Configuration to inspect.

    Returns:
        The non-empty API key.

    Raises:
        MissingCredentialError: If the key is unset or empty.
    """
    api_key = settings.gemini_api_key
    if not api_key:
        raise MissingCredentialError("GEMINI_API_KEY is not set in the environment or .env file.")
    return api_key


# Global configuration instance
# Loaded once at import; values are read-only for the process lifetime.
config = RelayConfig()
