"""Gemini Image Relay - pass-through proxy for the Gemini image API."""

__version__ = "0.1.0"

from imagerelay.core.config import RelayConfig, config

__all__ = [
    "RelayConfig",
    "config",
]
