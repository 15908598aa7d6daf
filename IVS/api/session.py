from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from IVS.api.dependencies import get_session_service, get_default_session_config
from IVS.api.errors import status_for
from IVS.api.schemas import SessionCreateRequest, CodeSubmitRequest, NotificationSchema
from packages.ivs_core.dto import CVDocumentDTO
from packages.ivs_dto.session import SessionViewDTO, ActionResultDTO, ResultsDTO
from packages.ivs_service.session_service import SessionService
from packages.ivs_session.dto import SessionConfig
from packages.ivs_session.state import QuestionMode

router = APIRouter(prefix="/sessions", tags=["Session"])

@router.post("", response_model=SessionViewDTO, status_code=status.HTTP_201_CREATED)
def create_session(
    request: SessionCreateRequest,
    service: SessionService = Depends(get_session_service),
    defaults: SessionConfig = Depends(get_default_session_config)
):
    """
    Create a session. Options not given fall back to the configured defaults.
    """
    config = SessionConfig(
        coding_stage_enabled=defaults.coding_stage_enabled if request.coding_stage_enabled is None else request.coding_stage_enabled,
        question_mode=defaults.question_mode if request.question_mode is None else QuestionMode(request.question_mode)
    )
    return service.create_session(config)

@router.get("/{session_id}", response_model=SessionViewDTO)
def get_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    dto = service.get_session(session_id)
    if not dto:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return dto

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    await service.close_session(session_id)

@router.get("/{session_id}/notifications", response_model=List[NotificationSchema])
def drain_notifications(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return [n.model_dump(mode="json") for n in service.drain_notifications(session_id)]

@router.get("/{session_id}/results", response_model=ResultsDTO)
def get_results(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    results = service.get_results(session_id)
    if results is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Results are not available yet")
    return results

# --- Commands ---

@router.post("/{session_id}/start", response_model=ActionResultDTO)
async def start_session(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    """
    Fixed question mode only: skip setup and begin questioning.
    """
    return _respond(await service.start(session_id), response)

@router.post("/{session_id}/setup", response_model=ActionResultDTO)
async def complete_setup(
    session_id: str,
    response: Response,
    job_description: str = Form(""),
    cv: Optional[UploadFile] = File(None),
    service: SessionService = Depends(get_session_service)
):
    """
    Job description + CV (PDF) intake. Generates the question set.
    """
    cv_document = None
    if cv is not None:
        cv_document = CVDocumentDTO(
            filename=cv.filename or "cv.pdf",
            content_type=cv.content_type or "",
            content=await cv.read()
        )
    return _respond(await service.complete_setup(session_id, job_description, cv_document), response)

@router.post("/{session_id}/recording/start", response_model=ActionResultDTO)
async def start_recording(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.start_recording(session_id), response)

@router.post("/{session_id}/recording/stop", response_model=ActionResultDTO)
async def stop_recording(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.stop_recording(session_id), response)

@router.post("/{session_id}/responses/{question_id}", response_model=ActionResultDTO)
async def upload_response(
    session_id: str,
    question_id: str,
    response: Response,
    audio: UploadFile = File(...),
    service: SessionService = Depends(get_session_service)
):
    """
    Store a recording captured on the client for the given question.
    """
    artifact = await audio.read()
    return _respond(await service.record_response(session_id, question_id, artifact), response)

@router.post("/{session_id}/next", response_model=ActionResultDTO)
async def next_question(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.next_question(session_id), response)

@router.post("/{session_id}/previous", response_model=ActionResultDTO)
async def previous_question(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.previous_question(session_id), response)

@router.post("/{session_id}/submit", response_model=ActionResultDTO)
async def submit_responses(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    """
    Submit every recorded answer for evaluation (last question only).
    """
    return _respond(await service.submit_responses(session_id), response)

@router.post("/{session_id}/coding/prompt", response_model=ActionResultDTO)
async def refetch_coding_prompt(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.refetch_coding_prompt(session_id), response)

@router.post("/{session_id}/coding/submit", response_model=ActionResultDTO)
async def submit_code(
    session_id: str,
    request: CodeSubmitRequest,
    response: Response,
    service: SessionService = Depends(get_session_service)
):
    return _respond(await service.submit_code(session_id, request.code), response)

@router.post("/{session_id}/restart", response_model=ActionResultDTO)
async def restart(session_id: str, response: Response, service: SessionService = Depends(get_session_service)):
    return _respond(await service.restart(session_id), response)


def _respond(result: ActionResultDTO, response: Response) -> ActionResultDTO:
    # The session view is returned on failure too; only the status code differs
    if not result.ok:
        response.status_code = status_for(result.error_code)
    return result
