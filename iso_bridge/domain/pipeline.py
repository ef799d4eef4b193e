"""Conversion pipeline - parse, build, validate, assess risk, infer assumptions"""

import re
from typing import Callable, Dict, List, Tuple

from iso_bridge.domain.models import (
    Conversion,
    ConversionSummary,
    MappingReport,
    MessageFormat,
    Risk,
    RiskLevel,
    ValidationResult,
)
from iso_bridge.domain.mt103 import parse_mt103
from iso_bridge.domain.nacha import parse_nacha, RECORD_NAMES
from iso_bridge.domain.pacs008 import build_pacs008
from iso_bridge.domain.pain001 import build_pain001
from iso_bridge.domain.validation import validate_xml
from iso_bridge.domain.risks import detect_risks
from iso_bridge.domain.assumptions import infer_assumptions

PARSERS: Dict[MessageFormat, Callable] = {
    MessageFormat.MT103: parse_mt103,
    MessageFormat.NACHA: parse_nacha,
}

BUILDERS: Dict[MessageFormat, Callable[..., Tuple[str, MappingReport]]] = {
    MessageFormat.MT103: build_pacs008,
    MessageFormat.NACHA: build_pain001,
}

MT103_TAG_PATTERN = re.compile(r":(\d+[A-Z]*):")


def detect_fields(text: str, fmt: MessageFormat) -> List[str]:
    """
    Preview which fields a raw input carries, without parsing it.

    MT103 yields tag names (e.g. "20", "32A"); NACHA yields record kinds
    (e.g. "File Header", "Entry Detail"). Unique, in order of appearance.
    """
    if fmt is MessageFormat.MT103:
        fields = MT103_TAG_PATTERN.findall(text)
    else:
        fields = [
            RECORD_NAMES[line.strip()[0]]
            for line in text.splitlines()
            if line.strip() and line.strip()[0] in RECORD_NAMES
        ]
    return list(dict.fromkeys(fields))


def summarize(validation: ValidationResult, risks: List[Risk], assumptions: List[str]) -> ConversionSummary:
    """
    Roll a conversion up into a 0-100 quality score.

    Scoring:
    - Base 50, +10 when the XML passed soft validation
    - -3 per assumption, capped at -30
    - -20 per Critical, -8 per Warning, -2 per Info risk, capped at -60
    """
    by_level = {level.value: 0 for level in RiskLevel}
    for risk in risks:
        by_level[risk.level.value] += 1

    assumptions_penalty = min(len(assumptions) * 3, 30)
    risk_penalty = min(
        by_level[RiskLevel.CRITICAL.value] * 20
        + by_level[RiskLevel.WARNING.value] * 8
        + by_level[RiskLevel.INFO.value] * 2,
        60,
    )
    base = 50 + (10 if validation.valid else 0)
    score = max(0, min(100, base - assumptions_penalty - risk_penalty))

    return ConversionSummary(
        score=score,
        status="Valid" if validation.valid else "Errors",
        error_count=len(validation.errors),
        assumptions_count=len(assumptions),
        risks_total=len(risks),
        risks_by_level=by_level,
    )


def convert(text: str, fmt: MessageFormat) -> Conversion:
    """
    Main entry point: run the whole pipeline on one raw legacy message.

    Parse errors propagate unchanged; validation, risk detection and
    assumption inference only ever report findings.
    """
    message = PARSERS[fmt](text)
    xml, mapping_report = BUILDERS[fmt](message)

    validation = validate_xml(xml, fmt)
    risks = detect_risks(message, fmt)
    mapping_report.risks = list(risks)
    assumptions = infer_assumptions(xml, mapping_report)

    return Conversion(
        format=fmt,
        message=message,
        xml=xml,
        mapping_report=mapping_report,
        validation=validation,
        risks=risks,
        assumptions=assumptions,
        summary=summarize(validation, risks, assumptions),
    )
