"""Inbound JSON body parsing for ``POST /generate``.

The relay treats the payload as opaque, but it still has to decide what
counts as a JSON body at all.  The rules here follow a conventional strict
JSON body parser:

- Only ``application/json`` requests are parsed; anything else (and an empty
  body) is relayed as ``{}``.
- Bodies over the configured size limit are rejected with 413, using
  ``Content-Length`` when present and the bytes actually received otherwise.
- The top-level value must be an object or an array, and the non-standard
  ``NaN`` / ``Infinity`` literals and out-of-range numbers are refused;
  violations are rejected with 400.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request

from imagerelay.core import strict_json

JSON_MEDIA_TYPE = "application/json"


class PayloadError(Exception):
    """Inbound body rejected before anything is sent upstream.

    Attributes:
        status_code: HTTP status to answer with (400 or 413).
        message: Human-readable reason, returned in the error body.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def is_json_request(request: Request) -> bool:
    """Return ``True`` when the request declares a JSON media type."""
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


async def _read_limited(request: Request, max_bytes: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadError(413, "request entity too large")

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise PayloadError(413, "request entity too large")
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json_body(raw: bytes) -> Any:
    """Decode *raw* as a strict JSON document.

    Args:
        raw: The request body bytes.  Empty input yields ``{}``.

    Returns:
        The decoded object or array.

    Raises:
        PayloadError: 400 if the bytes are not UTF-8, not valid JSON, or the
            top-level value is neither an object nor an array.
    """
    if not raw.strip():
        return {}

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadError(400, f"invalid UTF-8 in request body: {exc.reason}") from exc

    first = text.lstrip()[:1]
    if first not in ("{", "["):
        raise PayloadError(400, "request body must be a JSON object or array")

    try:
        payload = strict_json.loads(text)
    except ValueError as exc:
        raise PayloadError(400, str(exc)) from exc
    return payload


async def read_json_payload(request: Request, max_bytes: int) -> Any:
    """Read and decode the inbound payload of *request*.

    Args:
        request: The incoming Starlette request.
        max_bytes: Largest accepted body size in bytes.

    Returns:
        The decoded JSON object or array, or ``{}`` for non-JSON requests and
        empty bodies.

    Raises:
        PayloadError: 413 for oversized bodies, 400 for malformed ones.
    """
    if not is_json_request(request):
        return {}
    raw = await _read_limited(request, max_bytes)
    return parse_json_body(raw)
