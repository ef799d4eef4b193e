"""POST /v1/fields - preview tags or record kinds in raw legacy text"""

from fastapi import APIRouter

from iso_bridge.api.v1.schemas import FieldsRequest, FieldsResponse
from iso_bridge.domain.pipeline import detect_fields

router = APIRouter()


@router.post("/fields", response_model=FieldsResponse)
def list_fields(request_body: FieldsRequest):
    return FieldsResponse(format=request_body.format, fields=detect_fields(request_body.payload, request_body.format))
