"""Risk detection over parsed legacy messages"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Union

from iso_bridge.domain.models import MT103Message, NachaFile, Risk, RiskLevel, MessageFormat
from iso_bridge.domain.pain001 import total_cents
from iso_bridge.utils.formatters import format_cents

KNOWN_CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "CNY")

# ISO 20022 Ustrd holds at most 140 characters
MAX_REMITTANCE_LENGTH = 140

# $10M in cents
LARGE_ENTRY_CENTS = 1_000_000_000

ROUTING_LENGTH = 9

CONTROL_TOTAL_PATTERN = re.compile(r"[0-9]+")


def _amount_is_positive(amount: str) -> bool:
    try:
        value = Decimal(amount)
    except InvalidOperation:
        return False
    return value.is_finite() and value > 0


def detect_mt103_risks(message: MT103Message) -> List[Risk]:
    """
    Flag missing accounts, bad amounts, remittance gaps, uncommon
    currencies, missing addresses and missing charge codes.
    """
    risks: List[Risk] = []

    if not message.debtor.account:
        risks.append(Risk(
            id="mt103-missing-debtor-account",
            title="Missing Debtor Account",
            level=RiskLevel.WARNING,
            description="The debtor account number was not provided in the MT103 message.",
            mitigation="Verify account details manually before processing. Contact sender for complete information.",
        ))

    if not message.creditor.account:
        risks.append(Risk(
            id="mt103-missing-creditor-account",
            title="Missing Creditor Account",
            level=RiskLevel.WARNING,
            description="The creditor account number was not provided in the MT103 message.",
            mitigation="Confirm beneficiary account through alternative channels before settlement.",
        ))

    if not _amount_is_positive(message.amount):
        risks.append(Risk(
            id="mt103-invalid-amount",
            title="Invalid Payment Amount",
            level=RiskLevel.CRITICAL,
            description=f'The payment amount "{message.amount}" is invalid or zero.',
            mitigation="Reject transaction and request corrected MT103 with valid amount.",
        ))

    # Missing and over-long remittance are exclusive conditions
    if not message.remittance or not message.remittance.strip():
        risks.append(Risk(
            id="mt103-no-remittance",
            title="No Remittance Information",
            level=RiskLevel.INFO,
            description="Payment lacks remittance details, making reconciliation difficult.",
            mitigation="Contact sender for payment purpose. Consider adding internal reference notes.",
        ))
    elif len(message.remittance) > MAX_REMITTANCE_LENGTH:
        risks.append(Risk(
            id="mt103-long-remittance",
            title="Unstructured Remittance Info",
            level=RiskLevel.INFO,
            description="Remittance information is lengthy and unstructured, which may cause truncation.",
            mitigation="Consider structured remittance format for better interoperability.",
        ))

    if message.currency not in KNOWN_CURRENCIES:
        risks.append(Risk(
            id="mt103-uncommon-currency",
            title="Uncommon Currency",
            level=RiskLevel.WARNING,
            description=f'Currency "{message.currency}" is not commonly used or may require special handling.',
            mitigation="Verify currency code is correct and check exchange rate availability.",
        ))

    if not message.debtor.address_lines or not message.creditor.address_lines:
        risks.append(Risk(
            id="mt103-incomplete-address",
            title="Incomplete Address Information",
            level=RiskLevel.WARNING,
            description="One or more parties have incomplete address details, which may impact compliance checks.",
            mitigation="Obtain full address for KYC/AML screening and regulatory compliance.",
        ))

    if not message.charges:
        risks.append(Risk(
            id="mt103-no-charge-code",
            title="Missing Charge Bearer Code",
            level=RiskLevel.INFO,
            description="Charge allocation (SHA/OUR/BEN) not specified.",
            mitigation="Default charge allocation may apply. Confirm with sender if needed.",
        ))

    return risks


def _control_total(nacha: NachaFile) -> int:
    """total_credit from the control records; 0 when absent or not numeric"""
    raw = nacha.controls.get("total_credit", "")
    return int(raw) if CONTROL_TOTAL_PATTERN.fullmatch(raw) else 0


def detect_nacha_risks(nacha: NachaFile) -> List[Risk]:
    """
    Flag per-entry amount, routing, account and name problems, plus
    file-level control total mismatches and a missing effective date.

    Per-entry risk ids carry the 0-based entry index; titles use 1-based
    entry numbers.
    """
    risks: List[Risk] = []

    if not nacha.entries:
        risks.append(Risk(
            id="nacha-no-entries",
            title="No Payment Entries",
            level=RiskLevel.CRITICAL,
            description="NACHA file contains no payment entry records.",
            mitigation="File is invalid and cannot be processed. Request valid file.",
        ))

    for idx, entry in enumerate(nacha.entries):
        number = idx + 1

        if entry.amount_cents is None:
            risks.append(Risk(
                id=f"nacha-malformed-amount-{idx}",
                title=f"Entry {number}: Malformed Amount",
                level=RiskLevel.CRITICAL,
                description=f'Amount field "{entry.amount_raw}" is not a whole number of cents.',
                mitigation="Reject entry and request a corrected amount from originator.",
            ))
        elif entry.amount_cents <= 0:
            risks.append(Risk(
                id=f"nacha-invalid-amount-{idx}",
                title=f"Entry {number}: Invalid Amount",
                level=RiskLevel.CRITICAL,
                description=f"Payment entry has zero or negative amount ({entry.amount_cents} cents).",
                mitigation="Reject entry and request correction from originator.",
            ))
        elif entry.amount_cents > LARGE_ENTRY_CENTS:
            risks.append(Risk(
                id=f"nacha-large-amount-{idx}",
                title=f"Entry {number}: Unusually Large Amount",
                level=RiskLevel.WARNING,
                description=f"Payment amount exceeds $10 million ({format_cents(entry.amount_cents)} USD).",
                mitigation="Verify transaction authenticity and conduct enhanced due diligence.",
            ))

        if len(entry.routing) != ROUTING_LENGTH:
            risks.append(Risk(
                id=f"nacha-invalid-routing-{idx}",
                title=f"Entry {number}: Invalid Routing Number",
                level=RiskLevel.CRITICAL,
                description=f'Routing number "{entry.routing}" is not 9 digits.',
                mitigation="Correct routing number required for successful ACH processing.",
            ))

        if not entry.account.strip():
            risks.append(Risk(
                id=f"nacha-missing-account-{idx}",
                title=f"Entry {number}: Missing Account Number",
                level=RiskLevel.CRITICAL,
                description="Account number is missing or empty.",
                mitigation="Account number is mandatory. Request complete entry data.",
            ))

        if not entry.name.strip():
            risks.append(Risk(
                id=f"nacha-missing-name-{idx}",
                title=f"Entry {number}: Missing Recipient Name",
                level=RiskLevel.WARNING,
                description="Recipient name is missing.",
                mitigation="Name helps with reconciliation and fraud prevention. Obtain if possible.",
            ))

    # A zero or absent control total means "unknown", not "zero expected"
    computed_total = total_cents(nacha.entries)
    control_total = _control_total(nacha)
    if control_total > 0 and computed_total != control_total:
        risks.append(Risk(
            id="nacha-control-mismatch",
            title="Control Total Mismatch",
            level=RiskLevel.CRITICAL,
            description=f"Calculated total ({computed_total}) does not match file control total ({control_total}).",
            mitigation="File integrity compromised. Reject and request corrected file from originator.",
        ))

    if not nacha.batch_header.get("effective_entry_date"):
        risks.append(Risk(
            id="nacha-no-effective-date",
            title="Missing Effective Entry Date",
            level=RiskLevel.WARNING,
            description="Batch header lacks effective entry date.",
            mitigation="Settlement timing unclear. Confirm intended processing date.",
        ))

    return risks


RISK_DETECTORS: Dict[MessageFormat, Callable] = {
    MessageFormat.MT103: detect_mt103_risks,
    MessageFormat.NACHA: detect_nacha_risks,
}


def detect_risks(message: Union[MT103Message, NachaFile], fmt: MessageFormat) -> List[Risk]:
    """Run the rule set for the given legacy format"""
    return RISK_DETECTORS[fmt](message)


def sort_by_severity(risks: List[Risk]) -> List[Risk]:
    """Most severe first; detection order kept within a level"""
    return sorted(risks, key=lambda risk: risk.level.severity, reverse=True)
