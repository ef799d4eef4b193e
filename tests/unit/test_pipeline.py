"""Unit tests for the conversion pipeline and summary scoring"""

import pytest
from datetime import date
from iso_bridge.domain.models import MessageFormat, Risk, RiskLevel, ValidationResult
from iso_bridge.domain.pipeline import convert, detect_fields, summarize
from iso_bridge.domain.exceptions import MissingFieldError, InvalidFormatError


def _risk(level: RiskLevel) -> Risk:
    return Risk(id="r", title="t", level=level, description="d", mitigation="m")


def test_summarize_clean_valid_conversion():
    """Test base 50 plus 10 for a valid document"""
    summary = summarize(ValidationResult.ok(1.0), [], [])

    assert summary.score == 60
    assert summary.status == "Valid"
    assert summary.error_count == 0
    assert summary.risks_by_level == {"Info": 0, "Warning": 0, "Critical": 0}


def test_summarize_penalties():
    """Test assumption and risk penalties"""
    summary = summarize(
        ValidationResult.failed(["Missing required element: PmtInf"]),
        [_risk(RiskLevel.WARNING), _risk(RiskLevel.INFO)],
        ["a", "b"],
    )

    # 50 - 2*3 - (8 + 2)
    assert summary.score == 34
    assert summary.status == "Errors"
    assert summary.error_count == 1
    assert summary.assumptions_count == 2
    assert summary.risks_total == 2
    assert summary.risks_by_level == {"Info": 1, "Warning": 1, "Critical": 0}


def test_summarize_penalty_caps_and_floor():
    """Test penalties are capped and the score never drops below 0"""
    summary = summarize(
        ValidationResult.ok(1.0),
        [_risk(RiskLevel.CRITICAL)] * 5,
        [str(n) for n in range(20)],
    )
    assert summary.score == 0

    capped_assumptions = summarize(ValidationResult.ok(1.0), [], [str(n) for n in range(20)])
    assert capped_assumptions.score == 30


def test_convert_mt103(sample_mt103: str):
    """Test the full MT103 → pacs.008 run"""
    conversion = convert(sample_mt103, MessageFormat.MT103)

    assert conversion.format is MessageFormat.MT103
    assert conversion.message.trn_ref == "REF123456"
    assert "<FIToFICstmrCdtTrf>" in conversion.xml
    assert conversion.validation.valid
    assert conversion.risks == []
    assert conversion.mapping_report.risks == []
    assert conversion.assumptions
    assert conversion.summary.status == "Valid"
    assert conversion.summary.score == max(0, 60 - min(3 * len(conversion.assumptions), 30))


def test_convert_nacha_attaches_risks_to_report(nacha_builder):
    """Test risks land on both the conversion and its mapping report"""
    conversion = convert(nacha_builder(control_total=50000), MessageFormat.NACHA)

    assert "<CstmrCdtTrfInitn>" in conversion.xml
    assert conversion.validation.valid
    assert [risk.id for risk in conversion.risks] == ["nacha-control-mismatch"]
    assert conversion.mapping_report.risks == conversion.risks
    assert conversion.summary.risks_by_level["Critical"] == 1


def test_convert_propagates_parse_errors(sample_mt103: str):
    """Test fatal parse failures are not swallowed"""
    with pytest.raises(MissingFieldError, match=":20:"):
        convert(sample_mt103.replace(":20:REF123456\n", ""), MessageFormat.MT103)


def test_detect_fields_mt103(sample_mt103: str):
    """Test tags are listed once in order"""
    text = sample_mt103 + ":20:DUPLICATE\n"
    assert detect_fields(text, MessageFormat.MT103) == ["20", "32A", "50K", "59", "70", "71A"]


def test_detect_fields_nacha(sample_nacha: str):
    """Test record kinds are listed once in order"""
    assert detect_fields(sample_nacha, MessageFormat.NACHA) == [
        "File Header",
        "Batch Header",
        "Entry Detail",
        "Batch Control",
        "File Control",
    ]


def test_message_format_target_message():
    """Test each legacy format maps to its ISO 20022 message"""
    assert MessageFormat.MT103.target_message == "pacs.008"
    assert MessageFormat.NACHA.target_message == "pain.001"


def test_convert_nacha_non_ascii_effective_date(nacha_builder):
    """Test a digit-like effective date falls back to today instead of raising"""
    conversion = convert(nacha_builder(effective_date="²²²²²²"), MessageFormat.NACHA)

    assert f"<ReqdExctnDt>{date.today().isoformat()}</ReqdExctnDt>" in conversion.xml
    assert conversion.validation.valid


def test_convert_rejects_control_characters():
    """Test XML-incompatible input is a parse error rather than a build failure"""
    text = ":20:REF1\n:32A:250930USD10.00\n:50K:AC\x01ME\n:59:BETA\n"

    with pytest.raises(InvalidFormatError, match=":50K:"):
        convert(text, MessageFormat.MT103)
