"""POST /v1/convert - legacy message to ISO 20022 conversion endpoint"""

import time
import logging
from fastapi import APIRouter, HTTPException, Request

from iso_bridge.api.v1.schemas import ConvertRequest, ConvertResponse
from iso_bridge.api.dependencies import get_request_id
from iso_bridge.domain.pipeline import convert
from iso_bridge.domain.exceptions import ParseError
from iso_bridge.infrastructure.observability.metrics import record_conversion, record_rejection, record_validation
from iso_bridge.infrastructure.observability.logging import log_conversion

router = APIRouter()


@router.post("/convert", response_model=ConvertResponse)
def create_conversion(request_body: ConvertRequest, request: Request):
    """
    Convert an MT103 or NACHA message to pacs.008 / pain.001.

    Flow:
    1. Parse the legacy text (fatal on missing or malformed required fields)
    2. Build the XML and mapping report
    3. Soft-validate, detect risks, infer assumptions
    4. Return everything with a quality summary
    """
    start_time = time.perf_counter()
    request_id = get_request_id(request)
    source_format = request_body.format

    try:
        conversion = convert(request_body.payload, source_format)

    except ParseError as e:
        record_rejection(source_format.value)
        logging.warning(f"Parse failed: {e}", extra={"request_id": request_id, "source_format": source_format.value})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration = time.perf_counter() - start_time
    record_conversion(source_format.value, conversion.validation.valid, conversion.risks, duration)
    record_validation(source_format.target_message, conversion.validation.valid)
    log_conversion(
        request_id,
        source_format.value,
        conversion.summary.status,
        conversion.summary.error_count,
        conversion.summary.risks_total,
        conversion.summary.assumptions_count,
        duration * 1000,
    )

    return ConvertResponse.from_domain(conversion)
