"""Assumption inference by scanning generated XML for fallback structures"""

import re
from typing import List, Optional

from iso_bridge.domain.models import MappingReport

_FLAGS = re.IGNORECASE

STRUCTURED_ADDRESS = re.compile(r"<(Ctry|TwnNm|PstCd|StrtNm)>", _FLAGS)
ADDRESS_LINE = re.compile(r"<PstlAdr>[\s\S]*?<AdrLine>[\s\S]*?</PstlAdr>", _FLAGS)
OTHER_ACCOUNT_ID = re.compile(r"<Othr>[\s\S]*?<Id>.*?</Id>[\s\S]*?</Othr>", _FLAGS)
IBAN = re.compile(r"<IBAN>.*?</IBAN>", _FLAGS)
BIC = re.compile(r"<BICFI>.*?</BICFI>", _FLAGS)
CLEARING_ID = re.compile(r"<ClrSysId>|<ClrSysMmbId>", _FLAGS)
AMOUNT_CURRENCY = re.compile(r'<(?:InstdAmt|IntrBkSttlmAmt)[^>]*?Ccy="([A-Z]{3})"', _FLAGS)
CHARGE_BEARER = re.compile(r"<ChrgBr>(.*?)</ChrgBr>", _FLAGS)
ISO_CHARGE_BEARERS = ("SHAR", "SLEV", "CRED", "DEBT")
PURPOSE_CODE = re.compile(r"<Purp>\s*<Cd>.*?</Cd>\s*</Purp>", _FLAGS)
REMITTANCE = re.compile(r"<RmtInf>[\s\S]*?<Ustrd>.*?</Ustrd>[\s\S]*?</RmtInf>", _FLAGS)
MESSAGE_ID = re.compile(r"<MsgId>(.*?)</MsgId>", _FLAGS)
END_TO_END_ID = re.compile(r"<EndToEndId>(.*?)</EndToEndId>", _FLAGS)
INITIATION_MESSAGE = re.compile(r"<CstmrCdtTrfInitn[\s>]", _FLAGS)

# Words in mapping notes that mark a defaulted or assumed value
NOTE_MARKERS = ("assume", "default")


def _blocks(xml: str, tag: str) -> List[str]:
    """Inner text of every <tag>...</tag> element (tag matched exactly)"""
    pattern = re.compile(rf"<{tag}(?:\s[^>]*)?>([\s\S]*?)</{tag}>", _FLAGS)
    return pattern.findall(xml)


def _pick(xml: str, pattern: re.Pattern) -> str:
    match = pattern.search(xml)
    return match.group(1) if match else ""


def _agent_notes(xml: str) -> List[str]:
    notes = []
    debtor_bic = any(BIC.search(block) for block in _blocks(xml, "DbtrAgt"))
    creditor_bic = any(BIC.search(block) for block in _blocks(xml, "CdtrAgt"))

    if not debtor_bic:
        notes.append("Debtor Agent BIC missing - routed using clearing/member ID or account data.")
    if not creditor_bic:
        notes.append("Creditor Agent BIC missing - routed using clearing/member ID or account data.")
    if not debtor_bic and not creditor_bic and not CLEARING_ID.search(xml):
        notes.append("No BIC or clearing ID for agents - downstream routing may require manual enrichment.")
    return notes


def _account_notes(xml: str) -> List[str]:
    notes = []
    for tag, label in (("DbtrAcct", "Debtor"), ("CdtrAcct", "Creditor")):
        blocks = _blocks(xml, tag)
        has_iban = any(IBAN.search(block) for block in blocks)
        has_other = any(OTHER_ACCOUNT_ID.search(block) for block in blocks)
        if has_other and not has_iban:
            notes.append(f"{label} account not IBAN - used <Othr>/Id.")
    return notes


def _address_notes(xml: str) -> List[str]:
    notes = []
    for tag, label in (("Dbtr", "Debtor"), ("Cdtr", "Creditor")):
        blocks = _blocks(xml, tag)
        structured = any(STRUCTURED_ADDRESS.search(block) for block in blocks)
        free_form = any(ADDRESS_LINE.search(block) for block in blocks)
        if free_form and not structured:
            notes.append(f"{label} address provided as free-form <AdrLine> - country/postcode may be missing.")
    return notes


def infer_assumptions(xml: str, mapping_report: Optional[MappingReport] = None) -> List[str]:
    """
    Derive assumption notes from the shape of a generated pacs.008/pain.001.

    Notes are raised where richer ISO 20022 structure (agent BICs, IBANs,
    structured addresses, purpose and charge codes, remittance) is absent in
    favour of a cruder fallback. Mapping-row notes mentioning an assumption
    or a default are forwarded. The result is deduplicated; its order is
    not significant.
    """
    assumptions: List[str] = []

    assumptions.extend(_agent_notes(xml))
    assumptions.extend(_account_notes(xml))
    assumptions.extend(_address_notes(xml))

    if not _pick(xml, AMOUNT_CURRENCY):
        assumptions.append("Currency code missing on amount - downstream validation may fail.")

    if INITIATION_MESSAGE.search(xml):
        if not re.search(r"<ReqdExctnDt>\d{4}-\d{2}-\d{2}</ReqdExctnDt>", xml, _FLAGS):
            assumptions.append("Requested execution date missing - normalized/derived date may have been used.")
    elif not re.search(r"<IntrBkSttlmDt>\d{4}-\d{2}-\d{2}</IntrBkSttlmDt>", xml, _FLAGS):
        assumptions.append("Interbank settlement date missing - normalized/derived date may have been used.")

    message_id = _pick(xml, MESSAGE_ID)
    end_to_end_id = _pick(xml, END_TO_END_ID)
    if message_id and end_to_end_id and message_id == end_to_end_id:
        assumptions.append("MsgId equals EndToEndId - assumed reuse of transaction reference for both.")

    charge_bearer = _pick(xml, CHARGE_BEARER).strip()
    if not charge_bearer:
        assumptions.append("Charge bearer not provided - defaulted to scheme/clearing default (commonly SLEV).")
    elif charge_bearer.upper() not in ISO_CHARGE_BEARERS:
        assumptions.append(f"Charge bearer {charge_bearer} is not an ISO 20022 code - passed through from MT103.")
    if not PURPOSE_CODE.search(xml):
        assumptions.append("Purpose code not provided.")
    if not REMITTANCE.search(xml):
        assumptions.append("Unstructured remittance info missing.")

    if mapping_report is not None:
        for row in mapping_report.rows:
            note = (row.note or "").lower()
            if any(marker in note for marker in NOTE_MARKERS):
                assumptions.append(f"Mapping note: {row.note}")

    return list(dict.fromkeys(assumptions))
