"""
Magnitude decoder
=================

Storm Data stores damage as a coefficient plus a one-character magnitude
code, e.g. (25.0, "K") for US$25,000. This module maps the code to a power
of ten with a direct lookup table:

    H -> 2, K -> 3, M -> 6, B -> 9, + -> 1
    ?, -, blank, missing -> 0
    digit d -> d

Codes outside the table decode with exponent 0. They are never an error;
`exponent_for` returns None for them so callers can count them.
"""

from __future__ import annotations
import logging
import math
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_EXPONENTS: Dict[str, int] = {
    "h": 2,
    "k": 3,
    "m": 6,
    "b": 9,
    "+": 1,
    "?": 0,
    "-": 0,
    "": 0,
}
_EXPONENTS.update({str(d): d for d in range(10)})


def _is_absent(code: object) -> bool:
    if code is None:
        return True
    return isinstance(code, float) and math.isnan(code)


def exponent_for(code: object) -> Optional[int]:
    """Return the power of ten for a magnitude code, or None if unknown.

    Letters are case-insensitive; surrounding whitespace is ignored, so a
    single space reads as blank.
    """
    if _is_absent(code):
        return 0
    key = str(code).strip().lower()
    return _EXPONENTS.get(key)


def is_recognized(code: object) -> bool:
    return exponent_for(code) is not None


def decode(coefficient: float, code: object) -> float:
    """Decode (coefficient, code) into `coefficient * 10**exponent`."""
    exp = exponent_for(code)
    if exp is None:
        logger.debug("Unrecognized magnitude code %r; using exponent 0", code)
        exp = 0
    return float(coefficient) * 10 ** exp
