"""Pytest fixtures for testing"""

import pytest
from typing import Callable, List, Optional, Tuple
from fastapi.testclient import TestClient
from iso_bridge.api.main import create_app


SAMPLE_MT103 = """:20:REF123456
:32A:250930USD1234.56
:50K:/123456789
JOHN DOE
123 MAIN ST
NEW YORK NY
:59:/987654321
JANE SMITH
456 OAK AVE
LONDON UK
:70:INVOICE 12345
:71A:OUR
"""

# (name, account, amount in cents, memo)
NachaEntryFields = Tuple[str, str, int, str]

DEFAULT_ENTRIES: List[NachaEntryFields] = [
    ("ALICE BROWN", "111222333", 25000, "RF"),
    ("BOB GREEN", "444555666", 35000, ""),
]


def file_header_record(origin_name: str = "ACME BANK") -> str:
    return (
        "1" + "01" + " 123456789" + " 987654321" + "250930" + "0000" + "A" + "094" + "10" + "1"
        + "DEST BANK".ljust(23) + origin_name.ljust(23) + " " * 8
    )


def batch_header_record(company: str = "ACME CORP", effective_date: str = "251001") -> str:
    return (
        "5" + "220" + company.ljust(16) + " " * 20 + "1234567890" + "PPD" + "PAYROLL".ljust(10)
        + " " * 6 + effective_date.ljust(6) + "   " + "1" + "12345678" + "0000001"
    )


def entry_record(name: str, account: str, amount_cents: int, memo: str = "", trace: int = 1) -> str:
    return (
        "6" + "22" + "98765432" + "1" + account.ljust(17) + f"{amount_cents:010d}" + " " * 15
        + name.ljust(22) + memo.ljust(2) + "0" + f"{trace:015d}"
    )


def batch_control_record(entry_count: int, total_credit: int) -> str:
    return (
        "8" + "220" + f"{entry_count:06d}" + f"{0:010d}" + f"{0:012d}" + f"{total_credit:012d}"
        + "1234567890" + " " * 19 + " " * 6 + "12345678" + "0000001"
    )


def file_control_record(entry_count: int, total_credit: int) -> str:
    return (
        "9" + f"{1:06d}" + f"{1:06d}" + f"{entry_count:08d}" + f"{0:010d}" + f"{0:012d}"
        + f"{total_credit:012d}" + " " * 39
    )


def build_nacha(
    entries: Optional[List[NachaEntryFields]] = None,
    control_total: Optional[int] = None,
    company: str = "ACME CORP",
    effective_date: str = "251001",
    origin_name: str = "ACME BANK",
) -> str:
    """Assemble a single-batch NACHA file; control total defaults to the entry sum"""
    entries = DEFAULT_ENTRIES if entries is None else entries
    if control_total is None:
        control_total = sum(amount for _, _, amount, _ in entries)

    lines = [file_header_record(origin_name), batch_header_record(company, effective_date)]
    lines += [
        entry_record(name, account, amount, memo, trace=index)
        for index, (name, account, amount, memo) in enumerate(entries, start=1)
    ]
    lines.append(batch_control_record(len(entries), control_total))
    lines.append(file_control_record(len(entries), control_total))
    return "\n".join(lines) + "\n"


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def sample_mt103() -> str:
    """Complete MT103 with accounts, addresses, remittance and OUR charges"""
    return SAMPLE_MT103


@pytest.fixture
def nacha_builder() -> Callable[..., str]:
    """Factory for 94-character NACHA files"""
    return build_nacha


@pytest.fixture
def sample_nacha() -> str:
    """Two-entry NACHA file totalling $600.00"""
    return build_nacha()
