"""Soft validation of generated ISO 20022 XML (rule-based, not XSD)"""

import re
import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional

from lxml import etree

from iso_bridge.domain.models import MessageFormat, ValidationResult

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def _make_parser() -> etree.XMLParser:
    # lxml parsers must not be shared between threads
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


def _children(element: etree._Element, name: str) -> List[etree._Element]:
    """Child elements by local name, ignoring namespaces"""
    return [
        child
        for child in element
        if isinstance(child.tag, str) and etree.QName(child).localname == name
    ]


def _find(element: Optional[etree._Element], path: str) -> Optional[etree._Element]:
    """First element along a slash-separated local-name path"""
    node = element
    for name in path.split("/"):
        if node is None:
            return None
        matches = _children(node, name)
        node = matches[0] if matches else None
    return node


def _text(element: Optional[etree._Element], path: str) -> Optional[str]:
    """Stripped text at path, or None when the element is absent or empty"""
    node = _find(element, path)
    if node is None or node.text is None or not node.text.strip():
        return None
    return node.text.strip()


def _to_number(text: Optional[str]) -> Optional[Decimal]:
    if text is None:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _parse(xml: str, message_tag: str, errors: List[str]) -> Optional[etree._Element]:
    """Parse and locate the message element, recording root-level errors"""
    try:
        root = etree.fromstring(xml.encode("utf-8"), _make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        errors.append(f"XML parsing error: {e}")
        return None

    if etree.QName(root).localname != "Document":
        errors.append("Missing root element: Document")
        return None

    message = _find(root, message_tag)
    if message is None:
        errors.append(f"Missing element: {message_tag}")
    return message


def _check_group_header(message: etree._Element, errors: List[str]) -> Optional[etree._Element]:
    group_header = _find(message, "GrpHdr")
    if group_header is None:
        errors.append("Missing required element: GrpHdr")
        return None

    if _text(group_header, "MsgId") is None:
        errors.append("Missing required element: GrpHdr/MsgId")
    if _text(group_header, "CreDtTm") is None:
        errors.append("Missing required element: GrpHdr/CreDtTm")

    count = _text(group_header, "NbOfTxs")
    if count is None:
        errors.append("Missing required element: GrpHdr/NbOfTxs")
    elif _to_number(count) is None:
        errors.append("GrpHdr/NbOfTxs must be a number")

    return group_header


def _check_required(parent: etree._Element, prefix: str, path: str, errors: List[str]) -> None:
    if _text(parent, path) is None:
        errors.append(f"Missing required element: {prefix}/{path}")


def _check_date(parent: etree._Element, prefix: str, name: str, errors: List[str]) -> None:
    value = _text(parent, name)
    if value is None:
        errors.append(f"Missing required element: {prefix}/{name}")
    elif not ISO_DATE_PATTERN.match(value):
        errors.append(f"{prefix}/{name} must be in format YYYY-MM-DD")


def _check_amount(amount: etree._Element, path: str, errors: List[str], positive: bool) -> None:
    currency = amount.get("Ccy")
    if not currency:
        errors.append(f"Missing required attribute: {path}/@Ccy")
    elif not CURRENCY_PATTERN.match(currency):
        errors.append("Invalid currency code format (must be 3 uppercase letters)")

    value = _to_number(amount.text.strip() if amount.text else None)
    if value is None:
        errors.append(f"{path} must contain a valid number")
    elif positive and value <= 0:
        errors.append(f"{path} must be greater than 0")


def validate_pacs008(xml: str) -> ValidationResult:
    """
    Soft-validate a pacs.008 document.

    Checks group header identifiers, payment ids, settlement amount/currency,
    settlement date format and debtor/creditor names. All checks run; a
    missing parent element is reported once instead of once per child.
    """
    start_time = time.perf_counter()
    errors: List[str] = []

    message = _parse(xml, "FIToFICstmrCdtTrf", errors)
    if message is not None:
        _check_group_header(message, errors)

        transaction = _find(message, "CdtTrfTxInf")
        if transaction is None:
            errors.append("Missing required element: CdtTrfTxInf")
        else:
            _check_pacs008_transaction(transaction, errors)

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok((time.perf_counter() - start_time) * 1000)


def _check_pacs008_transaction(transaction: etree._Element, errors: List[str]) -> None:
    prefix = "CdtTrfTxInf"

    payment_id = _find(transaction, "PmtId")
    if payment_id is None:
        errors.append(f"Missing required element: {prefix}/PmtId")
    else:
        _check_required(payment_id, f"{prefix}/PmtId", "InstrId", errors)
        _check_required(payment_id, f"{prefix}/PmtId", "EndToEndId", errors)

    amount = _find(transaction, "IntrBkSttlmAmt")
    if amount is None:
        errors.append(f"Missing required element: {prefix}/IntrBkSttlmAmt")
    else:
        _check_amount(amount, f"{prefix}/IntrBkSttlmAmt", errors, positive=True)

    _check_date(transaction, prefix, "IntrBkSttlmDt", errors)

    for party in ("Dbtr", "Cdtr"):
        if _find(transaction, party) is None:
            errors.append(f"Missing required element: {prefix}/{party}")
        else:
            _check_required(transaction, prefix, f"{party}/Nm", errors)


def validate_pain001(xml: str) -> ValidationResult:
    """
    Soft-validate a pain.001 document.

    Besides the group header and payment information block, every
    CdtTrfTxInf (one or many) is checked for its end-to-end id, instructed
    amount, creditor name and creditor account.
    """
    start_time = time.perf_counter()
    errors: List[str] = []

    message = _parse(xml, "CstmrCdtTrfInitn", errors)
    if message is not None:
        group_header = _check_group_header(message, errors)
        if group_header is not None and _find(group_header, "InitgPty") is None:
            errors.append("Missing required element: GrpHdr/InitgPty")

        payment_info = _find(message, "PmtInf")
        if payment_info is None:
            errors.append("Missing required element: PmtInf")
        else:
            _check_payment_info(payment_info, errors)

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok((time.perf_counter() - start_time) * 1000)


def _check_payment_info(payment_info: etree._Element, errors: List[str]) -> None:
    prefix = "PmtInf"
    _check_required(payment_info, prefix, "PmtInfId", errors)
    _check_required(payment_info, prefix, "PmtMtd", errors)
    _check_date(payment_info, prefix, "ReqdExctnDt", errors)

    if _find(payment_info, "Dbtr") is None:
        errors.append(f"Missing required element: {prefix}/Dbtr")
    else:
        _check_required(payment_info, prefix, "Dbtr/Nm", errors)

    transactions = _children(payment_info, "CdtTrfTxInf")
    if not transactions:
        errors.append(f"Missing required element: {prefix}/CdtTrfTxInf")

    for index, transaction in enumerate(transactions, start=1):
        tx_prefix = f"CdtTrfTxInf[{index}]"

        _check_required(transaction, tx_prefix, "PmtId/EndToEndId", errors)

        amount = _find(transaction, "Amt/InstdAmt")
        if amount is None:
            errors.append(f"Missing required element: {tx_prefix}/Amt/InstdAmt")
        else:
            _check_amount(amount, f"{tx_prefix}/Amt/InstdAmt", errors, positive=False)

        _check_required(transaction, tx_prefix, "Cdtr/Nm", errors)

        if _find(transaction, "CdtrAcct") is None:
            errors.append(f"Missing required element: {tx_prefix}/CdtrAcct")


VALIDATORS: Dict[MessageFormat, Callable[[str], ValidationResult]] = {
    MessageFormat.MT103: validate_pacs008,
    MessageFormat.NACHA: validate_pain001,
}


def validate_xml(xml: str, fmt: MessageFormat) -> ValidationResult:
    """Validate XML generated from the given legacy format"""
    return VALIDATORS[fmt](xml)
