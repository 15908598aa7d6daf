from functools import lru_cache
from typing import Callable, Union

from packages.ivs_core.config import IVSConfig
from packages.ivs_providers.http_client import HttpInterviewServiceClient
from packages.ivs_providers.mock import MockQuestionSource, MockEvaluationClient
from packages.ivs_providers.question import IQuestionSource
from packages.ivs_recording.device import ICaptureDevice, UploadOnlyCaptureDevice
from packages.ivs_recording.mock import MockCaptureDevice
from packages.ivs_session.dto import SessionConfig
from packages.ivs_session.infrastructure.memory_repo import MemorySessionRepository
from packages.ivs_session.repository import SessionRepository
from packages.ivs_session.state import QuestionMode
from packages.ivs_service.session_service import SessionService

# --- Providers (External Adapters) ---

@lru_cache
def get_config() -> IVSConfig:
    return IVSConfig.load()

@lru_cache
def get_interview_client() -> Union[HttpInterviewServiceClient, MockEvaluationClient]:
    """
    Singleton client for the remote interview service (Mock unless configured).
    """
    config = get_config()
    if config.USE_MOCK_PROVIDERS:
        return MockEvaluationClient(latency=config.MOCK_LATENCY_MS / 1000.0)
    return HttpInterviewServiceClient(
        base_url=config.INTERVIEW_API_BASE_URL,
        timeout_sec=config.HTTP_TIMEOUT_SEC
    )

@lru_cache
def get_question_source() -> IQuestionSource:
    config = get_config()
    if config.USE_MOCK_PROVIDERS:
        return MockQuestionSource(latency=config.MOCK_LATENCY_MS / 1000.0)
    return get_interview_client()

def get_capture_device_factory() -> Callable[[], ICaptureDevice]:
    """
    One capture device per session. Without mocks the server cannot record,
    so clients upload their recordings instead.
    """
    if get_config().USE_MOCK_PROVIDERS:
        return MockCaptureDevice
    return UploadOnlyCaptureDevice

# --- Repositories ---

@lru_cache
def get_session_repository() -> SessionRepository:
    """
    Singleton Session Repository (Memory).
    Must be shared across requests to maintain state.
    """
    return MemorySessionRepository()

# --- Domain Services (Application Logic) ---

def get_default_session_config() -> SessionConfig:
    config = get_config()
    return SessionConfig(
        coding_stage_enabled=config.CODING_STAGE_ENABLED,
        question_mode=QuestionMode(config.QUESTION_MODE)
    )

def get_session_service() -> SessionService:
    """
    Transient Session Service.
    Injected with Singleton Repository and Providers.
    """
    client = get_interview_client()
    return SessionService(
        repository=get_session_repository(),
        question_source=get_question_source(),
        submission_sink=client,
        prompt_source=client,
        coding_evaluator=client,
        capture_device_factory=get_capture_device_factory(),
        default_config=get_default_session_config()
    )
