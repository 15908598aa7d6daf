from typing import Awaitable, Callable, List, Optional
from uuid import uuid4

from packages.ivs_core.dto import CVDocumentDTO
from packages.ivs_core.errors import SessionNotFound
from packages.ivs_core.logging import get_logger
from packages.ivs_dto.session import SessionViewDTO, ActionResultDTO, ResultsDTO
from packages.ivs_providers.question import IQuestionSource
from packages.ivs_providers.evaluation import ISubmissionSink, ICodingPromptSource, ICodingEvaluator
from packages.ivs_recording.device import ICaptureDevice
from packages.ivs_session.dto import SessionConfig
from packages.ivs_session.engine import InterviewSessionEngine
from packages.ivs_session.notifier import MemoryNotifier, Notification
from packages.ivs_session.outcome import ActionOutcome
from packages.ivs_session.repository import SessionRepository
from packages.ivs_service.mapper import SessionMapper

logger = get_logger("ivs.service")

class SessionService:
    """
    Application Service for managing interview sessions.
    Responsible for:
    1. Creating engines with their collaborators
    2. Looking sessions up (SessionNotFound otherwise)
    3. Mapping engine outcomes to DTOs
    """
    def __init__(
        self,
        repository: SessionRepository,
        question_source: IQuestionSource,
        submission_sink: ISubmissionSink,
        prompt_source: ICodingPromptSource,
        coding_evaluator: ICodingEvaluator,
        capture_device_factory: Callable[[], ICaptureDevice],
        default_config: Optional[SessionConfig] = None
    ):
        self.repository = repository
        self.question_source = question_source
        self.submission_sink = submission_sink
        self.prompt_source = prompt_source
        self.coding_evaluator = coding_evaluator
        self.capture_device_factory = capture_device_factory
        self.default_config = default_config or SessionConfig()

    def create_session(self, config: Optional[SessionConfig] = None) -> SessionViewDTO:
        session_id = f"sess_{uuid4().hex[:12]}"
        engine = InterviewSessionEngine(
            session_id=session_id,
            config=config or self.default_config,
            question_source=self.question_source,
            submission_sink=self.submission_sink,
            prompt_source=self.prompt_source,
            coding_evaluator=self.coding_evaluator,
            capture_device=self.capture_device_factory(),
            notifier=MemoryNotifier(),
        )
        self.repository.save(engine)
        logger.info(f"Created session {session_id} ({engine.config.question_mode.value}, coding={engine.config.coding_stage_enabled})")
        return SessionMapper.to_dto(engine)

    def get_session(self, session_id: str) -> Optional[SessionViewDTO]:
        """
        Read-Only operation.
        """
        engine = self.repository.get(session_id)
        if not engine:
            return None
        return SessionMapper.to_dto(engine)

    def get_results(self, session_id: str) -> Optional[ResultsDTO]:
        engine = self._get_engine(session_id)
        if engine.aggregate is None:
            return None
        return SessionMapper.to_results_dto(engine.aggregate)

    def drain_notifications(self, session_id: str) -> List[Notification]:
        engine = self._get_engine(session_id)
        return engine.notifier.drain()

    async def close_session(self, session_id: str):
        engine = self._get_engine(session_id)
        await engine.close()
        self.repository.delete(session_id)
        logger.info(f"Closed session {session_id}")

    # --- Commands ---

    async def start(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.start_session())

    async def complete_setup(self, session_id: str, job_description: str, cv_document: Optional[CVDocumentDTO]) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.complete_setup(job_description, cv_document))

    async def start_recording(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.start_recording())

    async def stop_recording(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.stop_recording())

    async def record_response(self, session_id: str, question_id: str, artifact: bytes) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.record_response(question_id, artifact))

    async def next_question(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.next_question())

    async def previous_question(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.previous_question())

    async def submit_responses(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.submit_responses())

    async def refetch_coding_prompt(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.refetch_coding_prompt())

    async def submit_code(self, session_id: str, code: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.submit_code(code))

    async def restart(self, session_id: str) -> ActionResultDTO:
        return await self._run(session_id, lambda e: e.restart())

    async def _run(
        self,
        session_id: str,
        command: Callable[[InterviewSessionEngine], Awaitable[ActionOutcome]]
    ) -> ActionResultDTO:
        engine = self._get_engine(session_id)
        outcome = await command(engine)
        return SessionMapper.to_action_dto(outcome, engine)

    def _get_engine(self, session_id: str) -> InterviewSessionEngine:
        engine = self.repository.get(session_id)
        if not engine:
            raise SessionNotFound(f"Session {session_id} not found", details={"session_id": session_id})
        return engine
