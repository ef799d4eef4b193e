"""MT103 → pacs.008.001.08 (FI to FI Customer Credit Transfer) builder"""

from typing import List, Tuple

from iso_bridge.domain.models import MT103Message, MappingReport, Party
from iso_bridge.domain.xml_mapping import MappedDocument, GENERATED, FIXED
from iso_bridge.utils.date_utils import normalize_date, utc_timestamp
from iso_bridge.utils.formatters import generate_uuid

PACS008_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:pacs.008.001.08"

# MT103 :71A: → ISO ChrgBr; unlisted codes pass through unchanged
CHARGE_BEARER_CODES = {"OUR": "DEBT"}


def map_charge_bearer(charges: str) -> str:
    return CHARGE_BEARER_CODES.get(charges, charges)


def _add_party(doc: MappedDocument, parent, tag: str, party: Party, source_tag: str, label: str) -> None:
    party_element = doc.group(parent, tag)
    doc.put(party_element, "Nm", party.name, source=f":{source_tag}: ({label} Name)")

    if party.address_lines:
        address = doc.group(party_element, "PstlAdr")
        for line in party.address_lines:
            doc.put(address, "AdrLine", line, source=f":{source_tag}: ({label} Address)")


def _add_account(doc: MappedDocument, parent, tag: str, account: str, source_tag: str, label: str) -> None:
    other = doc.group(parent, tag, "Id", "Othr")
    doc.put(other, "Id", account, source=f":{source_tag}: ({label} Account)")


def build_pacs008(message: MT103Message) -> Tuple[str, MappingReport]:
    """
    Build a pacs.008 document and its mapping report from a parsed MT103.

    Mapping:
    - GrpHdr/MsgId, PmtId/InstrId: generated PACS<uuid>
    - PmtId/EndToEndId: :20:
    - IntrBkSttlmAmt/@Ccy, IntrBkSttlmAmt, IntrBkSttlmDt: :32A:
    - ChrgBr: :71A: (OUR → DEBT)
    - Dbtr/DbtrAcct: :50K:, Cdtr/CdtrAcct: :59:
    - RmtInf/Ustrd: :70:

    Returns:
        (xml text, mapping report without risks)
    """
    message_id = f"PACS{generate_uuid()}"
    end_to_end_id = message.trn_ref or f"E2E{generate_uuid()}"
    settlement_date = normalize_date(message.value_date)

    doc = MappedDocument(PACS008_NAMESPACE, "FIToFICstmrCdtTrf", repeating=frozenset({"AdrLine"}))

    group_header = doc.group(doc.message, "GrpHdr")
    doc.put(group_header, "MsgId", message_id, source=GENERATED, note="Generated message identifier")
    doc.put(group_header, "CreDtTm", utc_timestamp(), source=GENERATED, note="Creation time of conversion")
    doc.put(group_header, "NbOfTxs", "1", source=FIXED, note="MT103 carries a single transaction")
    settlement = doc.group(group_header, "SttlmInf")
    doc.put(settlement, "SttlmMtd", "CLRG", source=FIXED, note="Settlement method defaulted to CLRG")

    transaction = doc.group(doc.message, "CdtTrfTxInf")
    payment_id = doc.group(transaction, "PmtId")
    doc.put(payment_id, "InstrId", message_id, source=GENERATED, note="Instruction id reuses message id")
    doc.put(
        payment_id,
        "EndToEndId",
        end_to_end_id,
        source=":20: (Transaction Reference)",
        value=message.trn_ref,
        note="End-to-end reference",
    )

    amount = doc.put(transaction, "IntrBkSttlmAmt", message.amount, source=":32A: (Amount)", note="Settlement amount")
    doc.attr(amount, "Ccy", message.currency, source=":32A: (Currency)", note="ISO currency code")
    doc.put(
        transaction,
        "IntrBkSttlmDt",
        settlement_date,
        source=":32A: (Value Date)",
        value=message.value_date,
        note=f"Normalized to {settlement_date}",
    )

    if message.charges:
        charge_bearer = map_charge_bearer(message.charges)
        doc.put(
            transaction,
            "ChrgBr",
            charge_bearer,
            source=":71A: (Charge Bearer)",
            value=message.charges,
            note=f"Mapped {message.charges} → {charge_bearer}" if charge_bearer != message.charges else None,
        )

    _add_party(doc, transaction, "Dbtr", message.debtor, "50K", "Debtor")
    if message.debtor.account:
        _add_account(doc, transaction, "DbtrAcct", message.debtor.account, "50K", "Debtor")

    _add_party(doc, transaction, "Cdtr", message.creditor, "59", "Creditor")
    if message.creditor.account:
        _add_account(doc, transaction, "CdtrAcct", message.creditor.account, "59", "Creditor")

    if message.remittance:
        remittance = doc.group(transaction, "RmtInf")
        doc.put(remittance, "Ustrd", message.remittance, source=":70: (Remittance Info)")

    report = MappingReport(
        message_id=message_id,
        rows=doc.rows,
        assumptions=_build_assumptions(message),
    )
    return doc.to_xml(), report


def _build_assumptions(message: MT103Message) -> List[str]:
    assumptions = []
    if not message.debtor.account:
        assumptions.append("Debtor account not provided; DbtrAcct omitted")
    if not message.creditor.account:
        assumptions.append("Creditor account not provided; CdtrAcct omitted")
    if not message.remittance:
        assumptions.append("No remittance information provided")
    if not message.charges:
        assumptions.append("Charge bearer (:71A:) not provided; ChrgBr omitted")
    for tag in message.extensions:
        assumptions.append(f"Field :{tag}: has no pacs.008 mapping and was not carried over")
    return assumptions
