from fastapi import APIRouter, Depends

from MIS.api.dependencies import get_session_service
from packages.mis_dto.result import SessionResult
from packages.mis_service.session_service import SessionService

router = APIRouter(prefix="/results", tags=["Results"])


@router.get("/{session_id}", response_model=SessionResult)
async def get_result(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return await service.get_result(session_id)
