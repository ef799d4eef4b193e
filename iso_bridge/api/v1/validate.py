"""POST /v1/validate - soft validation of submitted ISO 20022 XML"""

from fastapi import APIRouter

from iso_bridge.api.v1.schemas import ValidateRequest, ValidationSchema
from iso_bridge.domain.validation import validate_pacs008, validate_pain001
from iso_bridge.infrastructure.observability.metrics import record_validation

router = APIRouter()

VALIDATORS_BY_TYPE = {
    "pacs.008": validate_pacs008,
    "pain.001": validate_pain001,
}


@router.post("/validate", response_model=ValidationSchema)
def validate_message(request_body: ValidateRequest):
    """
    Check XML against the rule set for its message type.

    Malformed XML is reported as a finding, never as an HTTP error.
    """
    result = VALIDATORS_BY_TYPE[request_body.message_type](request_body.xml)
    record_validation(request_body.message_type, result.valid)
    return ValidationSchema.from_domain(result)
