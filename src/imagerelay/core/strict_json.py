"""Standard-conforming JSON encode/decode helpers.

Python's :mod:`json` accepts and emits ``NaN``, ``Infinity`` and
``-Infinity``, and turns numbers such as ``1e400`` into ``inf``.  None of
these are JSON.  Every JSON value the relay reads or writes goes through
:func:`loads` and :func:`dumps`, so a non-finite number is always a decode or
encode error (``ValueError``) rather than a value that fails later.
"""

from __future__ import annotations

import json
import math
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number {literal} is out of range")
    return value


def loads(text: str) -> Any:
    """Decode *text*, rejecting non-finite numbers.

    Raises:
        ValueError: If *text* is not valid JSON or contains a number that
            does not fit in a finite float.
    """
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def dumps(value: Any) -> str:
    """Encode *value* compactly, refusing to write ``NaN`` or ``Infinity``.

    Raises:
        ValueError: If *value* contains a non-finite float.
    """
    return json.dumps(value, separators=(",", ":"), allow_nan=False)
