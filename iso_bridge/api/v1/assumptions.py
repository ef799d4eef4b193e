"""POST /v1/assumptions - infer assumptions from ISO 20022 XML"""

from fastapi import APIRouter

from iso_bridge.api.v1.schemas import AssumptionsRequest, AssumptionsResponse
from iso_bridge.domain.assumptions import infer_assumptions

router = APIRouter()


@router.post("/assumptions", response_model=AssumptionsResponse)
def list_assumptions(request_body: AssumptionsRequest):
    """Scan the XML for fallback structures; no mapping report is available here"""
    return AssumptionsResponse(assumptions=infer_assumptions(request_body.xml))
