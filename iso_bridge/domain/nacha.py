"""NACHA ACH parser - fixed-width records into a NachaFile"""

import re
from typing import Dict, List, Optional, Tuple

from iso_bridge.domain.models import NachaEntry, NachaFile
from iso_bridge.domain.exceptions import MissingFieldError, InvalidFormatError
from iso_bridge.utils.formatters import is_xml_compatible

# (field, start, end) with 0-based inclusive start and exclusive end,
# matching the 94-character NACHA record formats.
Layout = Tuple[Tuple[str, int, int], ...]

FILE_HEADER_LAYOUT: Layout = (
    ("priority_code", 1, 3),
    ("immediate_destination", 3, 13),
    ("immediate_origin", 13, 23),
    ("file_creation_date", 23, 29),
    ("file_creation_time", 29, 33),
    ("file_id_modifier", 33, 34),
    ("record_size", 34, 37),
    ("blocking_factor", 37, 39),
    ("format_code", 39, 40),
    ("immediate_destination_name", 40, 63),
    ("immediate_origin_name", 63, 86),
    ("reference_code", 86, 94),
)

BATCH_HEADER_LAYOUT: Layout = (
    ("service_class_code", 1, 4),
    ("company_name", 4, 20),
    ("company_discretionary_data", 20, 40),
    ("company_id", 40, 50),
    ("standard_entry_class", 50, 53),
    ("company_entry_description", 53, 63),
    ("company_descriptive_date", 63, 69),
    ("effective_entry_date", 69, 75),
    ("settlement_date", 75, 78),
    ("originator_status_code", 78, 79),
    ("originating_dfi", 79, 87),
    ("batch_number", 87, 94),
)

ENTRY_DETAIL_LAYOUT: Layout = (
    ("transaction_code", 1, 3),
    ("routing", 3, 11),
    ("check_digit", 11, 12),
    ("account", 12, 29),
    ("amount", 29, 39),
    ("individual_id", 39, 54),
    ("name", 54, 76),
    ("discretionary_data", 76, 78),
    ("addenda_indicator", 78, 79),
    ("trace_number", 79, 94),
)

BATCH_CONTROL_LAYOUT: Layout = (
    ("service_class_code", 1, 4),
    ("entry_count", 4, 10),
    ("entry_hash", 10, 20),
    ("total_debit", 20, 32),
    ("total_credit", 32, 44),
    ("company_id", 44, 54),
    ("originating_dfi", 79, 87),
    ("batch_number", 87, 94),
)

FILE_CONTROL_LAYOUT: Layout = (
    ("batch_count", 1, 7),
    ("block_count", 7, 13),
    ("entry_addenda_count", 13, 21),
    ("entry_hash", 21, 31),
    ("total_debit", 31, 43),
    ("total_credit", 43, 55),
)

RECORD_NAMES = {
    "1": "File Header",
    "5": "Batch Header",
    "6": "Entry Detail",
    "8": "Batch Control",
    "9": "File Control",
}

_INTEGER = re.compile(r"-?[0-9]+")

# Block padding after the file control record
_FILLER = re.compile(r"9+")


def slice_fields(line: str, layout: Layout) -> Dict[str, str]:
    """Cut a record into its named fields, trimming surrounding whitespace"""
    return {name: line[start:end].strip() for name, start, end in layout}


def parse_amount_cents(raw: str) -> Optional[int]:
    """Integer cents, or None when the span is blank or not a number"""
    raw = raw.strip()
    if not _INTEGER.fullmatch(raw):
        return None
    return int(raw)


def parse_entry(line: str) -> NachaEntry:
    """Build an entry from a type 6 record"""
    fields = slice_fields(line, ENTRY_DETAIL_LAYOUT)
    return NachaEntry(
        name=fields["name"],
        routing=fields["routing"] + fields["check_digit"],
        account=fields["account"],
        amount_cents=parse_amount_cents(fields["amount"]),
        memo=fields["discretionary_data"] or None,
        transaction_code=fields["transaction_code"],
        individual_id=fields["individual_id"],
        trace_number=fields["trace_number"],
        amount_raw=fields["amount"],
    )


def parse_nacha(text: str) -> NachaFile:
    """
    Parse a single-batch NACHA file.

    The first character of each non-blank line selects the record layout;
    unknown record types (including addenda) are ignored. All-9 block filler
    lines are skipped. Entry amounts that are not integers are kept as None
    instead of failing the parse.

    Raises:
        MissingFieldError: no file header, no batch header or no entries
        InvalidFormatError: a record holds characters that cannot appear in XML
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    file_header: Dict[str, str] = {}
    batch_header: Dict[str, str] = {}
    entries: List[NachaEntry] = []
    batch_control: Dict[str, str] = {}
    file_control: Dict[str, str] = {}

    for number, line in enumerate(lines, start=1):
        record_type = line[0]
        if record_type in RECORD_NAMES and not is_xml_compatible(line):
            raise InvalidFormatError(
                f"{RECORD_NAMES[record_type]} (record {number}) contains control characters not allowed in XML"
            )

        if record_type == "1":
            file_header = {"record_type": "1", **slice_fields(line, FILE_HEADER_LAYOUT)}
        elif record_type == "5":
            batch_header = {"record_type": "5", **slice_fields(line, BATCH_HEADER_LAYOUT)}
        elif record_type == "6":
            entries.append(parse_entry(line))
        elif record_type == "8":
            batch_control = {"record_type": "8", **slice_fields(line, BATCH_CONTROL_LAYOUT)}
        elif record_type == "9" and not _FILLER.fullmatch(line):
            file_control = {"file_record_type": "9", **slice_fields(line, FILE_CONTROL_LAYOUT)}

    if not file_header:
        raise MissingFieldError("Missing File Header (record type 1)")
    if not batch_header:
        raise MissingFieldError("Missing Batch Header (record type 5)")
    if not entries:
        raise MissingFieldError("No entry details found (record type 6)")

    # File trailer totals win over batch totals on shared field names
    controls = {**batch_control, **file_control}

    return NachaFile(
        file_header=file_header,
        batch_header=batch_header,
        entries=tuple(entries),
        controls=controls,
    )
