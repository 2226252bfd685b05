"""Upstream forwarding for the Gemini Image Relay.

This module provides :class:`GeminiRelay`, the single point of contact with
the Gemini ``generateContent`` endpoint.  It forwards an already-parsed JSON
payload unchanged and classifies what comes back into a :class:`RelayResult`
that the API layer renders verbatim.

Key Responsibilities
--------------------
- **URL construction** - the model identifier is interpolated into the path
  and the credential is sent as the ``key`` query parameter.
- **Pass-through** - the payload is serialised as JSON without adding,
  removing, or rewriting any field.
- **Outcome classification** - non-success responses are read as text and
  parsed as JSON when possible, otherwise kept as raw text.  Success
  responses are always parsed as JSON.

Errors
------
Transport failures (``httpx.TransportError``) and a success body that is not
valid JSON (``ValueError``) propagate to the caller unchanged.  The API layer
turns every such exception into the same internal-error response.

Usage
-----
::

    async with httpx.AsyncClient() as http_client:
        relay = GeminiRelay(http_client, api_key="...")
        result = await relay.forward({"contents": [...]})
        print(result.status_code, result.body)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from imagerelay.core import strict_json
from imagerelay.core.config import DEFAULT_BASE_URL, DEFAULT_MODEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayResult:
    """Upstream outcome to be written back to the caller.

    Attributes:
        status_code: The upstream HTTP status, forwarded as-is.
        body: Parsed JSON value when ``is_json`` is true, otherwise the raw
            upstream text.
        is_json: Whether ``body`` should be rendered as JSON.
    """

    status_code: int
    body: Any
    is_json: bool = True


class GeminiRelay:
    """Forwards JSON payloads to the Gemini ``generateContent`` endpoint.

    Holds no per-request state, so one instance is shared by all concurrent
    requests of the application.

    Attributes:
        _client (httpx.AsyncClient):
            Shared HTTP client owned by the application lifespan.
        _api_key (str):
            Credential sent as the ``key`` query parameter.
        _base_url (str):
            Scheme and host of the upstream API, without trailing slash.
        _model (str):
            Model identifier interpolated into the request path.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
    ) -> None:
        self._client = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model

    @property
    def model(self) -> str:
        """Model identifier used in the upstream path."""
        return self._model

    def endpoint_url(self) -> str:
        """Return the upstream URL without the credential query parameter."""
        return f"{self._base_url}/v1beta/models/{self._model}:generateContent"

    async def forward(self, payload: Any) -> RelayResult:
        """POST *payload* upstream and classify the response.

        Args:
            payload: Inbound JSON value, sent unchanged as the request body.

        Returns:
            A :class:`RelayResult` carrying the upstream status and body.

        Raises:
            httpx.TransportError: If the upstream call cannot be completed.
            ValueError: If *payload* holds a non-finite number, or a success
                response body is not valid JSON.
        """
        response = await self._client.post(
            self.endpoint_url(),
            params={"key": self._api_key},
            headers={"Content-Type": "application/json"},
            content=strict_json.dumps(payload),
        )

        if not response.is_success:
            error_text = response.text
            logger.error(
                "Gemini API error (status %s): %s",
                response.status_code,
                error_text,
            )
            try:
                return RelayResult(response.status_code, strict_json.loads(error_text))
            except ValueError:
                return RelayResult(response.status_code, error_text, is_json=False)

        # Non-JSON success bodies raise ValueError; only error bodies fall back to text.
        return RelayResult(response.status_code, strict_json.loads(response.text))
