"""Identifier and amount formatting helpers"""

import re
import uuid
from decimal import Decimal, ROUND_HALF_EVEN

_CENT = Decimal("0.01")


def generate_uuid() -> str:
    """Random RFC 4122 version 4 UUID string"""
    return str(uuid.uuid4())


def format_cents(amount_cents: int) -> str:
    """
    Render an integer number of cents as a dollar amount with two decimals.

    Uses Decimal with banker's rounding; integer cents never actually need
    rounding, so the result is exact.

    Example:
        60000 → "600.00"
        12345 → "123.45"
    """
    dollars = Decimal(amount_cents).scaleb(-2)
    return str(dollars.quantize(_CENT, rounding=ROUND_HALF_EVEN))


# Code points lxml refuses in text and attribute values (XML 1.0 Char production)
XML_INCOMPATIBLE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def is_xml_compatible(text: str) -> bool:
    return XML_INCOMPATIBLE.search(text) is None
