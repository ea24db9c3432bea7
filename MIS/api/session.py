from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, status

from MIS.api.dependencies import get_session_service
from MIS.api.schemas import AnswerRequest, RedirectResponse, SessionCreateRequest
from packages.mis_dto.result import SessionResult
from packages.mis_dto.session import SessionViewDTO
from packages.mis_service.session_service import SessionService
from packages.mis_session.state import BootstrapAction, Direction

router = APIRouter(prefix="/sessions", tags=["Session"])


@router.post("", response_model=SessionViewDTO, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: SessionCreateRequest,
    service: SessionService = Depends(get_session_service)
):
    """
    Start a new interview. Requires an existing candidate profile.
    Repeating the call with the same entry_key returns the same session.
    """
    return await service.start(request.user_id, entry_key=request.entry_key)


@router.get("/{session_id}", response_model=Union[SessionViewDTO, RedirectResponse])
async def get_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Resume a session. Scored sessions answer with a redirect to their results.
    """
    action, view = await service.open(session_id)
    if action == BootstrapAction.SHOW_RESULTS:
        return RedirectResponse(session_id=session_id, redirect=f"/api/v1/results/{session_id}")
    return view


@router.put("/{session_id}/draft", response_model=SessionViewDTO)
async def save_draft(
    session_id: str,
    request: AnswerRequest,
    service: SessionService = Depends(get_session_service)
):
    """Keep the in-progress answer so a timer expiry records it."""
    return await service.set_draft(session_id, request.answer)


@router.post("/{session_id}/next", response_model=SessionViewDTO)
async def next_question(
    session_id: str,
    request: Optional[AnswerRequest] = Body(None),
    service: SessionService = Depends(get_session_service)
):
    answer = request.answer if request else None
    return await service.navigate(session_id, Direction.FORWARD, answer)


@router.post("/{session_id}/previous", response_model=SessionViewDTO)
async def previous_question(
    session_id: str,
    request: Optional[AnswerRequest] = Body(None),
    service: SessionService = Depends(get_session_service)
):
    answer = request.answer if request else None
    return await service.navigate(session_id, Direction.BACKWARD, answer)


@router.post("/{session_id}/finish", response_model=SessionResult)
async def finish_session(
    session_id: str,
    request: Optional[AnswerRequest] = Body(None),
    service: SessionService = Depends(get_session_service)
):
    """
    Submit the interview for scoring. Only one submission per session;
    a failed submission may be retried.
    """
    answer = request.answer if request else None
    return await service.finish(session_id, answer)
