"""NACHA → pain.001.001.09 (Customer Credit Transfer Initiation) builder"""

from typing import List, Tuple

from iso_bridge.domain.models import NachaFile, NachaEntry, MappingReport
from iso_bridge.domain.xml_mapping import MappedDocument, GENERATED, FIXED
from iso_bridge.utils.date_utils import normalize_date, utc_timestamp
from iso_bridge.utils.formatters import generate_uuid, format_cents

PAIN001_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:pain.001.001.09"

# NACHA has no currency field
ENTRY_CURRENCY = "USD"
PAYMENT_METHOD = "TRF"
SERVICE_LEVEL = "SEPA"
PLACEHOLDER_EFFECTIVE_DATE = "250930"

STANDING_ASSUMPTIONS = (
    "All amounts assumed to be in USD",
    "Payment method set to TRF (Transfer)",
    "Service level code set to SEPA (default)",
)


def total_cents(entries: Tuple[NachaEntry, ...]) -> int:
    """Sum of entry amounts, skipping entries whose amount did not parse"""
    return sum(entry.amount_cents for entry in entries if entry.amount_cents is not None)


def entry_amount_text(entry: NachaEntry) -> str:
    """Dollar amount for an entry; malformed spans are passed through verbatim"""
    if entry.amount_cents is None:
        return entry.amount_raw
    return format_cents(entry.amount_cents)


def build_pain001(nacha: NachaFile) -> Tuple[str, MappingReport]:
    """
    Build a pain.001 document and its mapping report from a parsed NACHA file.

    The company in the batch header is the debtor; every entry becomes one
    CdtTrfTxInf with a synthetic EndToEndId E2E-<n>.

    Returns:
        (xml text, mapping report without risks)
    """
    message_id = f"PAIN{generate_uuid()}"
    payment_info_id = f"PMT{generate_uuid()}"

    raw_effective_date = nacha.batch_header.get("effective_entry_date", "")
    effective_date = normalize_date(raw_effective_date or PLACEHOLDER_EFFECTIVE_DATE)
    company_name = nacha.batch_header.get("company_name", "")
    company_id = nacha.batch_header.get("company_id", "")
    origin_name = nacha.file_header.get("immediate_origin_name", "")

    entry_count = str(len(nacha.entries))
    control_sum = format_cents(total_cents(nacha.entries))

    doc = MappedDocument(PAIN001_NAMESPACE, "CstmrCdtTrfInitn", repeating=frozenset({"CdtTrfTxInf"}))

    group_header = doc.group(doc.message, "GrpHdr")
    doc.put(group_header, "MsgId", message_id, source=GENERATED, note="Generated message identifier")
    doc.put(group_header, "CreDtTm", utc_timestamp(), source=GENERATED, note="Creation time of conversion")
    doc.put(group_header, "NbOfTxs", entry_count, source="Entry Count", note="Number of entry detail records")
    doc.put(group_header, "CtrlSum", control_sum, source="Total Amount (calculated)", note="Sum of all entry amounts")
    initiating_party = doc.group(group_header, "InitgPty")
    doc.put(
        initiating_party,
        "Nm",
        origin_name or "Initiating Party",
        source="File Header (Immediate Origin Name)",
        value=origin_name,
        note="Initiating party from file header" if origin_name else "Origin name missing; default name used",
    )

    payment_info = doc.group(doc.message, "PmtInf")
    doc.put(payment_info, "PmtInfId", payment_info_id, source=GENERATED, note="Generated payment information id")
    doc.put(payment_info, "PmtMtd", PAYMENT_METHOD, source=FIXED, note="Payment method fixed default TRF")
    doc.put(payment_info, "NbOfTxs", entry_count, source="Entry Count")
    doc.put(payment_info, "CtrlSum", control_sum, source="Total Amount (calculated)", note="Sum of all entry amounts")
    service_level = doc.group(payment_info, "PmtTpInf", "SvcLvl")
    doc.put(service_level, "Cd", SERVICE_LEVEL, source=FIXED, note="Service level fixed default SEPA")
    doc.put(
        payment_info,
        "ReqdExctnDt",
        effective_date,
        source="Batch Header (Effective Date)",
        value=raw_effective_date,
        note=f"Normalized to {effective_date}" if raw_effective_date else f"Effective date missing; defaulted to {effective_date}",
    )
    debtor = doc.group(payment_info, "Dbtr")
    doc.put(
        debtor,
        "Nm",
        company_name or "Unknown Debtor",
        source="Batch Header (Company Name)",
        value=company_name,
        note="Debtor is the company" if company_name else "Company name missing; default debtor name used",
    )
    debtor_account = doc.group(payment_info, "DbtrAcct", "Id", "Othr")
    doc.put(
        debtor_account,
        "Id",
        company_id or "UNKNOWN",
        source="Batch Header (Company ID)",
        value=company_id,
        note=None if company_id else "Company id missing; defaulted to UNKNOWN",
    )

    for index, entry in enumerate(nacha.entries, start=1):
        _add_transaction(doc, payment_info, index, entry)

    report = MappingReport(
        message_id=message_id,
        rows=doc.rows,
        assumptions=_build_assumptions(nacha, raw_effective_date, company_name),
    )
    return doc.to_xml(), report


def _add_transaction(doc: MappedDocument, payment_info, index: int, entry: NachaEntry) -> None:
    label = f"Entry {index}"
    transaction = doc.group(payment_info, "CdtTrfTxInf")

    payment_id = doc.group(transaction, "PmtId")
    doc.put(payment_id, "EndToEndId", f"E2E-{index}", source=GENERATED, note="Synthetic end-to-end id")

    amount_group = doc.group(transaction, "Amt")
    if entry.amount_cents is None:
        amount_note = "Amount is not numeric; passed through unchanged"
    else:
        amount_note = f"Converted from {entry.amount_cents} cents"
    amount = doc.put(
        amount_group,
        "InstdAmt",
        entry_amount_text(entry),
        source=f"{label} (Amount)",
        value=entry.amount_raw,
        note=amount_note,
    )
    doc.attr(amount, "Ccy", ENTRY_CURRENCY, source=FIXED, note="NACHA carries no currency; assumed USD")

    member = doc.group(transaction, "CdtrAgt", "FinInstnId", "ClrSysMmbId")
    doc.put(member, "MmbId", entry.routing, source=f"{label} (Routing)", note="ABA routing number")

    creditor = doc.group(transaction, "Cdtr")
    doc.put(creditor, "Nm", entry.name, source=f"{label} (Name)")

    creditor_account = doc.group(transaction, "CdtrAcct", "Id", "Othr")
    doc.put(creditor_account, "Id", entry.account, source=f"{label} (Account)")

    if entry.memo:
        remittance = doc.group(transaction, "RmtInf")
        doc.put(remittance, "Ustrd", entry.memo, source=f"{label} (Memo)")


def _build_assumptions(nacha: NachaFile, raw_effective_date: str, company_name: str) -> List[str]:
    assumptions = list(STANDING_ASSUMPTIONS)
    if not raw_effective_date:
        assumptions.append(
            f"Effective entry date missing; defaulted to {normalize_date(PLACEHOLDER_EFFECTIVE_DATE)}"
        )
    if not company_name:
        assumptions.append("Company name missing; debtor named 'Unknown Debtor'")
    for index, entry in enumerate(nacha.entries, start=1):
        if entry.amount_cents is None:
            assumptions.append(f"Entry {index} amount '{entry.amount_raw}' is not numeric; excluded from CtrlSum")
    return assumptions
