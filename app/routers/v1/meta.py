"""Meta router — static lookup tables for clients."""

from fastapi import APIRouter

from app.core.response import DataResponse
from app.domain.enums import STATUS_METADATA
from app.schemas.common import StatusMetaOut

router = APIRouter(prefix="/meta", tags=["Meta"])


@router.get("/statuses", response_model=DataResponse[list[StatusMetaOut]])
async def list_statuses():
    """Label, severity and icon key for every property status."""
    return {"data": [
        StatusMetaOut(status=status.value, label=meta.label, severity=meta.severity, icon_key=meta.icon_key)
        for status, meta in STATUS_METADATA.items()
    ]}
