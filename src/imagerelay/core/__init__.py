"""Core functionality for the Gemini Image Relay.

- **RelayConfig**: Configuration management using Pydantic Settings
- **config**: Global configuration instance (loads from environment variables)
- **GeminiRelay**: Forwards payloads to the upstream ``generateContent`` endpoint
- **RelayResult**: Upstream status and body, ready to be written back verbatim
"""

from imagerelay.core.config import MissingCredentialError, RelayConfig, config, require_api_key
from imagerelay.core.relay import GeminiRelay, RelayResult

__all__ = [
    "GeminiRelay",
    "MissingCredentialError",
    "RelayConfig",
    "RelayResult",
    "config",
    "require_api_key",
]
