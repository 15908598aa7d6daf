from fastapi import Request, status
from fastapi.responses import JSONResponse
from packages.ivs_core.errors import (
    IVSBaseError,
    MissingResponse,
    InvalidSetupInput,
    EmptyCodeSubmission,
    InvalidAction,
    ActionInProgress,
    SessionNotFound,
    DeviceUnavailable,
    EncodingFailed,
    GenerationFailed,
    SubmissionFailed,
    FetchFailed,
    EvaluationFailed,
)

ERROR_STATUS = {
    MissingResponse.code: status.HTTP_400_BAD_REQUEST,
    InvalidSetupInput.code: status.HTTP_400_BAD_REQUEST,
    EmptyCodeSubmission.code: status.HTTP_400_BAD_REQUEST,
    SessionNotFound.code: status.HTTP_404_NOT_FOUND,
    InvalidAction.code: status.HTTP_409_CONFLICT,
    ActionInProgress.code: status.HTTP_423_LOCKED,
    EncodingFailed.code: status.HTTP_502_BAD_GATEWAY,
    GenerationFailed.code: status.HTTP_502_BAD_GATEWAY,
    SubmissionFailed.code: status.HTTP_502_BAD_GATEWAY,
    FetchFailed.code: status.HTTP_502_BAD_GATEWAY,
    EvaluationFailed.code: status.HTTP_502_BAD_GATEWAY,
    DeviceUnavailable.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}

def status_for(code: str) -> int:
    return ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)

async def ivs_error_handler(request: Request, exc: IVSBaseError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc.code),
        content={"code": exc.code, "message": exc.message, "details": exc.details}
    )
