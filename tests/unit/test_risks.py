"""Unit tests for risk detection"""

from dataclasses import replace
from iso_bridge.domain.models import MessageFormat, NachaFile, RiskLevel
from iso_bridge.domain.mt103 import parse_mt103
from iso_bridge.domain.nacha import parse_nacha
from iso_bridge.domain.risks import detect_mt103_risks, detect_nacha_risks, detect_risks, sort_by_severity
from tests.conftest import batch_header_record, entry_record, file_header_record

MINIMAL_MT103 = ":20:REF1\n:32A:250930XYZ0.00\n:50K:ACME\n:59:BETA\n"


def _ids(risks):
    return [risk.id for risk in risks]


def test_mt103_complete_message_has_no_risks(sample_mt103: str):
    """Test a complete message is clean"""
    assert detect_mt103_risks(parse_mt103(sample_mt103)) == []


def test_mt103_minimal_message_risks():
    """Test every missing optional element is flagged"""
    risks = detect_mt103_risks(parse_mt103(MINIMAL_MT103))

    assert _ids(risks) == [
        "mt103-missing-debtor-account",
        "mt103-missing-creditor-account",
        "mt103-invalid-amount",
        "mt103-no-remittance",
        "mt103-uncommon-currency",
        "mt103-incomplete-address",
        "mt103-no-charge-code",
    ]
    levels = {risk.id: risk.level for risk in risks}
    assert levels["mt103-invalid-amount"] == RiskLevel.CRITICAL
    assert levels["mt103-no-remittance"] == RiskLevel.INFO
    assert levels["mt103-uncommon-currency"] == RiskLevel.WARNING


def test_mt103_long_remittance(sample_mt103: str):
    """Test remittance over 140 characters is flagged instead of missing"""
    message = parse_mt103(sample_mt103.replace("INVOICE 12345", "X" * 141))
    ids = _ids(detect_mt103_risks(message))

    assert ids == ["mt103-long-remittance"]


def test_nacha_control_total_matches(nacha_builder):
    """Test entries summing to the control total raise no mismatch"""
    risks = detect_nacha_risks(parse_nacha(nacha_builder(control_total=60000)))
    assert "nacha-control-mismatch" not in _ids(risks)


def test_nacha_control_total_mismatch(nacha_builder):
    """Test a differing control total raises exactly one Critical"""
    risks = detect_nacha_risks(parse_nacha(nacha_builder(control_total=50000)))
    mismatches = [risk for risk in risks if risk.id == "nacha-control-mismatch"]

    assert len(mismatches) == 1
    assert mismatches[0].level == RiskLevel.CRITICAL
    assert "(60000)" in mismatches[0].description
    assert "(50000)" in mismatches[0].description


def test_nacha_zero_control_total_is_unknown(nacha_builder):
    """Test a zero control total is not compared"""
    risks = detect_nacha_risks(parse_nacha(nacha_builder(control_total=0)))
    assert "nacha-control-mismatch" not in _ids(risks)


def test_nacha_entry_risks(nacha_builder):
    """Test per-entry ids use 0-based indexes"""
    text = nacha_builder(entries=[
        ("ALICE", "111", 0, ""),
        ("", "", 1_000_000_001, ""),
    ], control_total=0)
    risks = detect_nacha_risks(parse_nacha(text))

    assert _ids(risks) == [
        "nacha-invalid-amount-0",
        "nacha-large-amount-1",
        "nacha-missing-account-1",
        "nacha-missing-name-1",
    ]
    assert risks[0].title == "Entry 1: Invalid Amount"
    assert "10000000.01 USD" in risks[1].description


def test_nacha_invalid_routing():
    """Test a routing number shorter than 9 digits"""
    line = entry_record("ALICE", "111", 100)
    line = line[:3] + "1234    " + line[11:]
    text = "\n".join([file_header_record(), batch_header_record(), line])
    risks = detect_nacha_risks(parse_nacha(text))

    assert _ids(risks) == ["nacha-invalid-routing-0"]
    assert '"12341"' in risks[0].description


def test_nacha_malformed_amount_is_critical():
    """Test an unparseable amount gets its own risk, not the zero-amount one"""
    line = entry_record("ALICE", "111", 0)
    line = line[:29] + "12A4567890" + line[39:]
    text = "\n".join([file_header_record(), batch_header_record(), line])
    risks = detect_nacha_risks(parse_nacha(text))

    assert _ids(risks) == ["nacha-malformed-amount-0"]
    assert risks[0].level == RiskLevel.CRITICAL


def test_nacha_missing_effective_date(nacha_builder):
    """Test a blank effective entry date"""
    risks = detect_nacha_risks(parse_nacha(nacha_builder(effective_date="")))
    assert _ids(risks) == ["nacha-no-effective-date"]


def test_nacha_no_entries():
    """Test an entry-less file object is Critical"""
    nacha = NachaFile(file_header={}, batch_header={"effective_entry_date": "251001"}, entries=(), controls={})
    assert _ids(detect_nacha_risks(nacha)) == ["nacha-no-entries"]


def test_detect_risks_dispatch(sample_mt103: str, sample_nacha: str):
    """Test the rule set is chosen by format"""
    assert detect_risks(parse_mt103(sample_mt103), MessageFormat.MT103) == []
    assert detect_risks(parse_nacha(sample_nacha), MessageFormat.NACHA) == []


def test_sort_by_severity():
    """Test Critical first, detection order kept within a level"""
    risks = detect_mt103_risks(parse_mt103(MINIMAL_MT103))
    ordered = sort_by_severity(risks)

    assert [risk.level for risk in ordered[:1]] == [RiskLevel.CRITICAL]
    assert _ids(ordered)[1:5] == [
        "mt103-missing-debtor-account",
        "mt103-missing-creditor-account",
        "mt103-uncommon-currency",
        "mt103-incomplete-address",
    ]
    assert ordered[-1].level == RiskLevel.INFO


def test_mt103_remittance_at_limit(sample_mt103: str):
    """Test exactly 140 characters of remittance is not flagged"""
    message = parse_mt103(sample_mt103.replace("INVOICE 12345", "X" * 140))
    assert detect_mt103_risks(message) == []


def test_nacha_non_ascii_control_total_is_unknown(sample_nacha: str):
    """Test a digit-like control total is treated as absent instead of raising"""
    nacha = replace(parse_nacha(sample_nacha), controls={"total_credit": "²" * 12})
    assert "nacha-control-mismatch" not in _ids(detect_nacha_risks(nacha))


def test_nacha_block_filler_does_not_cause_mismatch(sample_nacha: str):
    """Test all-9 padding after the file control leaves totals intact"""
    text = sample_nacha + ("9" * 94 + "\n") * 2
    assert detect_nacha_risks(parse_nacha(text)) == []
