"""SWIFT MT103 parser - tag-delimited text into an MT103Message"""

import re
from typing import Dict, List

from iso_bridge.domain.models import MT103Message, Party
from iso_bridge.domain.exceptions import MissingFieldError, InvalidFormatError
from iso_bridge.utils.formatters import is_xml_compatible

TAG_PATTERN = re.compile(r"^:(\w+):(.*)$")
FIELD_32A_PATTERN = re.compile(r"^([0-9]{6})([A-Z]{3})([0-9,\.]+)$")

# Tags interpreted by the parser; everything else is kept as an extension
KNOWN_TAGS = ("20", "32A", "50K", "59", "70", "71A")

PARTY_LABELS = {
    "50K": "Ordering Customer",
    "59": "Beneficiary Customer",
}


def split_tags(text: str) -> Dict[str, List[str]]:
    """
    Group lines under the most recent :TAG: line.

    Lines before the first tag are dropped, blank continuation lines are
    skipped, and a repeated tag replaces the earlier occurrence.
    """
    tags: Dict[str, List[str]] = {}
    current_tag = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        match = TAG_PATTERN.match(line)
        if match:
            current_tag = match.group(1)
            rest = match.group(2).strip()
            tags[current_tag] = [rest] if rest else []
        elif current_tag is not None and line:
            tags[current_tag].append(line)

    return tags


def _first_line(tags: Dict[str, List[str]], tag: str) -> str:
    lines = tags.get(tag)
    return lines[0] if lines else ""


def parse_party(tag: str, lines: List[str]) -> Party:
    """
    Parse a :50K: / :59: block.

    A first line starting with "/" carries the account; the next line is the
    name and any remaining lines are the address, in order.
    """
    label = PARTY_LABELS.get(tag, "Party")
    if not lines:
        raise MissingFieldError(f"Missing required field :{tag}: ({label})")

    account = None
    name_and_address = list(lines)
    if name_and_address[0].startswith("/"):
        account = name_and_address[0][1:].strip() or None
        name_and_address = name_and_address[1:]

    if not name_and_address:
        raise MissingFieldError(f"Missing name in :{tag}: ({label})")

    return Party(
        name=name_and_address[0],
        address_lines=tuple(name_and_address[1:]),
        account=account,
    )


def parse_mt103(text: str) -> MT103Message:
    """
    Parse raw MT103 text into the canonical message.

    Raises:
        MissingFieldError: :20:, :32A:, :50K: or :59: absent
        InvalidFormatError: :32A: is not YYMMDDCCCAMOUNT, or a field holds
            characters that cannot appear in XML
    """
    tags = split_tags(text)

    for tag, lines in tags.items():
        if not all(is_xml_compatible(line) for line in lines):
            raise InvalidFormatError(f"Field :{tag}: contains control characters not allowed in XML")

    trn_ref = _first_line(tags, "20")
    if not trn_ref:
        raise MissingFieldError("Missing required field :20: (Transaction Reference)")

    field_32a = _first_line(tags, "32A")
    if not field_32a:
        raise MissingFieldError("Missing required field :32A: (Value Date/Currency/Amount)")

    match = FIELD_32A_PATTERN.match(field_32a)
    if not match:
        raise InvalidFormatError(
            "Invalid :32A: format. Expected YYMMDDCCCAMOUNT (e.g., 250930USD1234.56)"
        )
    value_date, currency, amount = match.groups()

    debtor = parse_party("50K", tags.get("50K", []))
    creditor = parse_party("59", tags.get("59", []))

    remittance = " ".join(tags.get("70", [])).strip() or None
    charges = _first_line(tags, "71A") or None

    extensions = {
        tag: " ".join(lines)
        for tag, lines in tags.items()
        if tag not in KNOWN_TAGS
    }

    return MT103Message(
        trn_ref=trn_ref,
        value_date=value_date,
        currency=currency,
        amount=amount.replace(",", ".", 1),
        debtor=debtor,
        creditor=creditor,
        remittance=remittance,
        charges=charges,
        extensions=extensions,
    )
