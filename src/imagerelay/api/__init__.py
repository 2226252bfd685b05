"""Gemini Image Relay: FastAPI HTTP layer.

This package contains the FastAPI application and the inbound body parsing
used by the relay route.

Modules
-------
main
    FastAPI application factory, the ``POST /generate`` relay route, the
    static site mount and the ``main()`` CLI entry point.
payload
    Size-limited, strict JSON parsing of inbound request bodies.
"""
