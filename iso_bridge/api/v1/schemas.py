"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

from iso_bridge.config import settings
from iso_bridge.domain.models import (
    Conversion,
    ConversionSummary,
    MappingReport,
    MessageFormat,
    Risk,
    ValidationResult,
)


class ConvertRequest(BaseModel):
    """Request body for POST /v1/convert"""

    format: MessageFormat = Field(..., description="Legacy input format: MT103 or NACHA")
    payload: str = Field(..., min_length=1, max_length=settings.max_payload_chars, description="Raw legacy message text")


class FieldsRequest(BaseModel):
    """Request body for POST /v1/fields"""

    format: MessageFormat
    payload: str = Field(..., max_length=settings.max_payload_chars)


class ValidateRequest(BaseModel):
    """Request body for POST /v1/validate"""

    message_type: Literal["pacs.008", "pain.001"]
    xml: str = Field(..., max_length=settings.max_payload_chars)


class AssumptionsRequest(BaseModel):
    """Request body for POST /v1/assumptions"""

    xml: str = Field(..., max_length=settings.max_payload_chars)


class MappingRowSchema(BaseModel):
    """One legacy field traced to its XML location"""

    source: str
    value: str
    target_xpath: str
    note: Optional[str] = None


class RiskSchema(BaseModel):
    """Single detected risk"""

    id: str
    title: str
    level: str
    description: str
    mitigation: str

    @classmethod
    def from_domain(cls, risk: Risk) -> "RiskSchema":
        return cls(
            id=risk.id,
            title=risk.title,
            level=risk.level.value,
            description=risk.description,
            mitigation=risk.mitigation,
        )


class MappingReportSchema(BaseModel):
    """Mapping report attached to a conversion"""

    message_id: str
    rows: List[MappingRowSchema]
    assumptions: List[str]
    risks: List[RiskSchema]

    @classmethod
    def from_domain(cls, report: MappingReport) -> "MappingReportSchema":
        return cls(
            message_id=report.message_id,
            rows=[
                MappingRowSchema(source=row.source, value=row.value, target_xpath=row.target_xpath, note=row.note)
                for row in report.rows
            ],
            assumptions=list(report.assumptions),
            risks=[RiskSchema.from_domain(risk) for risk in report.risks],
        )


class ValidationSchema(BaseModel):
    """Response for POST /v1/validate, also embedded in conversions"""

    valid: bool
    errors: List[str]
    validation_time_ms: Optional[float] = None

    @classmethod
    def from_domain(cls, result: ValidationResult) -> "ValidationSchema":
        return cls(valid=result.valid, errors=list(result.errors), validation_time_ms=result.validation_time_ms)


class SummarySchema(BaseModel):
    """Quality score and counts for one conversion"""

    score: int
    status: str
    error_count: int
    assumptions_count: int
    risks_total: int
    risks_by_level: Dict[str, int]

    @classmethod
    def from_domain(cls, summary: ConversionSummary) -> "SummarySchema":
        return cls(
            score=summary.score,
            status=summary.status,
            error_count=summary.error_count,
            assumptions_count=summary.assumptions_count,
            risks_total=summary.risks_total,
            risks_by_level=dict(summary.risks_by_level),
        )


class ConvertResponse(BaseModel):
    """Response for POST /v1/convert"""

    format: MessageFormat
    message_type: str
    xml: str
    mapping_report: MappingReportSchema
    validation: ValidationSchema
    risks: List[RiskSchema]
    assumptions: List[str]
    summary: SummarySchema

    @classmethod
    def from_domain(cls, conversion: Conversion) -> "ConvertResponse":
        return cls(
            format=conversion.format,
            message_type=conversion.format.target_message,
            xml=conversion.xml,
            mapping_report=MappingReportSchema.from_domain(conversion.mapping_report),
            validation=ValidationSchema.from_domain(conversion.validation),
            risks=[RiskSchema.from_domain(risk) for risk in conversion.risks],
            assumptions=list(conversion.assumptions),
            summary=SummarySchema.from_domain(conversion.summary),
        )


class AssumptionsResponse(BaseModel):
    """Response for POST /v1/assumptions"""

    assumptions: List[str]


class FieldsResponse(BaseModel):
    """Response for POST /v1/fields"""

    format: MessageFormat
    fields: List[str]
