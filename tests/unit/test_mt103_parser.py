"""Unit tests for MT103 parsing"""

import pytest
from iso_bridge.domain.mt103 import parse_mt103, parse_party, split_tags
from iso_bridge.domain.exceptions import MissingFieldError, InvalidFormatError, ParseError


def test_parse_mt103_complete_message(sample_mt103: str):
    """Test all known tags of a complete message are captured"""
    message = parse_mt103(sample_mt103)

    assert message.trn_ref == "REF123456"
    assert message.value_date == "250930"
    assert message.currency == "USD"
    assert message.amount == "1234.56"
    assert message.debtor.account == "123456789"
    assert message.debtor.name == "JOHN DOE"
    assert message.debtor.address_lines == ("123 MAIN ST", "NEW YORK NY")
    assert message.creditor.account == "987654321"
    assert message.creditor.name == "JANE SMITH"
    assert message.remittance == "INVOICE 12345"
    assert message.charges == "OUR"
    assert message.extensions == {}


def test_parse_mt103_decimal_comma():
    """Test European decimal comma in :32A: becomes a dot"""
    text = ":20:REF1\n:32A:250930EUR1000,50\n:50K:ACME\n:59:BETA\n"
    message = parse_mt103(text)

    assert message.currency == "EUR"
    assert message.amount == "1000.50"


def test_parse_mt103_missing_reference(sample_mt103: str):
    """Test missing :20: is fatal and names the tag"""
    text = sample_mt103.replace(":20:REF123456\n", "")

    with pytest.raises(MissingFieldError, match=":20:"):
        parse_mt103(text)


def test_parse_mt103_missing_32a(sample_mt103: str):
    """Test missing :32A: is fatal"""
    text = sample_mt103.replace(":32A:250930USD1234.56\n", "")

    with pytest.raises(MissingFieldError, match=":32A:"):
        parse_mt103(text)


def test_parse_mt103_invalid_32a_format(sample_mt103: str):
    """Test malformed :32A: raises InvalidFormatError, a ParseError"""
    text = sample_mt103.replace("250930USD1234.56", "2509USD12")

    with pytest.raises(InvalidFormatError, match="YYMMDDCCCAMOUNT"):
        parse_mt103(text)
    with pytest.raises(ParseError):
        parse_mt103(text)


def test_parse_mt103_missing_beneficiary():
    """Test missing :59: is fatal"""
    text = ":20:REF1\n:32A:250930USD10.00\n:50K:ACME\n"

    with pytest.raises(MissingFieldError, match=":59:"):
        parse_mt103(text)


def test_parse_mt103_optional_fields_absent():
    """Test parties without accounts and missing :70:/:71A:"""
    text = ":20:REF1\n:32A:250930USD10.00\n:50K:ACME LTD\n:59:BETA GMBH\n"
    message = parse_mt103(text)

    assert message.debtor.account is None
    assert message.debtor.address_lines == ()
    assert message.creditor.name == "BETA GMBH"
    assert message.remittance is None
    assert message.charges is None


def test_parse_mt103_multiline_remittance():
    """Test :70: continuation lines are joined with spaces"""
    text = ":20:REF1\n:32A:250930USD10.00\n:50K:ACME\n:59:BETA\n:70:INV 1\nINV 2\n\nINV 3\n"
    message = parse_mt103(text)

    assert message.remittance == "INV 1 INV 2 INV 3"


def test_parse_mt103_unknown_tags_kept_as_extensions():
    """Test tags outside the known set are preserved"""
    text = ":20:REF1\n:23B:CRED\n:32A:250930USD10.00\n:50K:ACME\n:59:BETA\n:72:/ACC/NOTE\nMORE\n"
    message = parse_mt103(text)

    assert message.extensions == {"23B": "CRED", "72": "/ACC/NOTE MORE"}


def test_split_tags_repeated_tag_replaces_earlier():
    """Test a later occurrence of a tag wins"""
    tags = split_tags(":20:FIRST\n:20:SECOND\n")
    assert tags["20"] == ["SECOND"]


def test_split_tags_ignores_text_before_first_tag():
    """Test preamble lines are dropped"""
    tags = split_tags("{1:F01BANK}\n:20:REF1\n")
    assert tags == {"20": ["REF1"]}


def test_parse_party_account_only_is_missing_name():
    """Test an account line without a name line is rejected"""
    with pytest.raises(MissingFieldError, match="Missing name in :50K:"):
        parse_party("50K", ["/12345"])


def test_parse_mt103_rejects_control_characters():
    """Test characters that cannot be written to XML fail the parse and name the tag"""
    text = ":20:REF1\n:32A:250930USD10.00\n:50K:AC\x01ME\n:59:BETA\n"

    with pytest.raises(InvalidFormatError, match=":50K:"):
        parse_mt103(text)


def test_parse_mt103_32a_requires_ascii_digits():
    """Test non-ASCII digits in the value date are a format error"""
    text = ":20:REF1\n:32A:²²0930USD10.00\n:50K:ACME\n:59:BETA\n"

    with pytest.raises(InvalidFormatError, match=":32A:"):
        parse_mt103(text)
