import logging
from typing import Awaitable, Dict, List, Optional, Tuple, Type, TypeVar

from packages.ivs_core.dto import CVDocumentDTO
from packages.ivs_core.errors import (
    IVSBaseError,
    InvalidAction,
    InvalidSetupInput,
    MissingResponse,
    EmptyCodeSubmission,
    DeviceUnavailable,
    EncodingFailed,
    GenerationFailed,
    SubmissionFailed,
    FetchFailed,
    EvaluationFailed,
    ActionInProgress,
)
from packages.ivs_providers.question import IQuestionSource
from packages.ivs_providers.evaluation import ISubmissionSink, ICodingPromptSource, ICodingEvaluator
from packages.ivs_recording.buffer import RecordingBuffer
from packages.ivs_recording.device import ICaptureDevice
from .dto import (
    SessionConfig,
    SessionContext,
    SessionAggregate,
    Question,
    Evaluation,
    CodingEvaluation,
    SetupState,
    QuestioningState,
    CodingState,
    ResultsState,
)
from .encoder import ResponseEncoder
from .guard import ActionGuard
from .ledger import ResponseLedger
from .notifier import Notifier, MemoryNotifier, Notification, NotificationLevel
from .outcome import ActionOutcome
from .questions import FixedQuestionSource
from .state import SessionAction, SessionStage

# Logger setup
logger = logging.getLogger("ivs.session")

T = TypeVar("T")

# (title, description). A None description shows the error message itself.
FAILURE_NOTICES: Dict[str, Tuple[str, Optional[str]]] = {
    MissingResponse.code: ("No recording found", "Please record your answer before proceeding."),
    DeviceUnavailable.code: ("Microphone access denied", "Please allow microphone access to record your answer."),
    InvalidSetupInput.code: ("Check your details", None),
    EmptyCodeSubmission.code: ("Empty answer", "Please write some code before submitting."),
    EncodingFailed.code: ("Error preparing answers", "Your recordings could not be prepared. Please try again."),
    GenerationFailed.code: ("Question generation failed", "We couldn't generate interview questions. Please try again."),
    SubmissionFailed.code: ("Error submitting answers", "Please try again."),
    FetchFailed.code: ("Coding question unavailable", "Failed to load the coding question. Please try again."),
    EvaluationFailed.code: ("Evaluation failed", "Failed to evaluate your code. Please try again."),
    ActionInProgress.code: ("Please wait", "Another request is still in progress."),
}

class InterviewSessionEngine:
    """
    Core Logic for a mock interview session.
    Orchestrates stage transitions, gating and evaluation aggregation.

    Every public operation returns an ActionOutcome. Failures never change the
    session state: the user stays on the current stage and may retry.
    """
    def __init__(
        self,
        session_id: str,
        config: SessionConfig,
        question_source: IQuestionSource,
        submission_sink: ISubmissionSink,
        prompt_source: ICodingPromptSource,
        coding_evaluator: ICodingEvaluator,
        capture_device: ICaptureDevice,
        notifier: Optional[Notifier] = None,
        fixed_source: Optional[FixedQuestionSource] = None,
        encoder: Optional[ResponseEncoder] = None
    ):
        self.session_id = session_id
        self.config = config
        self.question_source = question_source
        self.submission_sink = submission_sink
        self.prompt_source = prompt_source
        self.coding_evaluator = coding_evaluator
        self.capture_device = capture_device
        self.notifier = notifier or MemoryNotifier()
        self.fixed_source = fixed_source or FixedQuestionSource()
        self.encoder = encoder or ResponseEncoder()
        self.guard = ActionGuard()

        self._new_session_scope()

    def _new_session_scope(self):
        """Session-scoped state is always created fresh, never reset field by field."""
        self.context = SessionContext(session_id=self.session_id, config=self.config)
        self.ledger = ResponseLedger()
        self.recorder = RecordingBuffer(self.capture_device)

    # ------------------------------------------------------------------
    # Read side (used by the UI to enable/disable actions)
    # ------------------------------------------------------------------
    @property
    def stage(self) -> SessionStage:
        return self.context.stage

    @property
    def state(self):
        return self.context.state

    @property
    def is_busy(self) -> bool:
        return self.guard.busy

    @property
    def questions(self) -> Tuple[Question, ...]:
        return getattr(self.context.state, "questions", ())

    @property
    def current_question(self) -> Optional[Question]:
        state = self.context.state
        if isinstance(state, QuestioningState):
            return state.current_question
        return None

    @property
    def can_go_next(self) -> bool:
        state = self.context.state
        return (
            isinstance(state, QuestioningState)
            and not state.is_last_question
            and not self.is_busy
            and self.ledger.has(state.current_question.id)
        )

    @property
    def can_submit(self) -> bool:
        state = self.context.state
        return (
            isinstance(state, QuestioningState)
            and state.is_last_question
            and not self.is_busy
            and not self.recorder.is_recording
            and self.ledger.has(state.current_question.id)
        )

    @property
    def aggregate(self) -> Optional[SessionAggregate]:
        state = self.context.state
        if isinstance(state, ResultsState):
            return state.aggregate
        return None

    # ------------------------------------------------------------------
    # SETUP
    # ------------------------------------------------------------------
    async def start_session(self) -> ActionOutcome:
        """
        Fixed question mode: skip the intake and load the static set.
        """
        action = SessionAction.START
        try:
            self._expect(SetupState, action)
            self.guard.check(action)
            if self.config.setup_required:
                raise InvalidAction("This session requires a job description and CV")

            questions = self.fixed_source.load()
            self.context.state = QuestioningState(questions=questions)
            logger.info(f"Session {self.session_id} started with {len(questions)} fixed questions")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def complete_setup(self, job_description: str, cv_document: Optional[CVDocumentDTO]) -> ActionOutcome:
        """
        SETUP -> QUESTIONING once the question source returns a question set.
        """
        action = SessionAction.SETUP
        try:
            self._expect(SetupState, action)
            self.guard.check(action)
            if not self.config.setup_required:
                raise InvalidAction("This session uses the fixed question set")
            self._validate_intake(job_description, cv_document)

            with self.guard.hold(action):
                questions = await self._call(
                    GenerationFailed,
                    self.question_source.generate(job_description.strip(), cv_document)
                )

            questions = tuple(questions or ())
            if not questions:
                raise GenerationFailed("No questions were generated")
            if len({q.id for q in questions}) != len(questions):
                raise GenerationFailed("Generated questions have duplicate ids")

            self.context.state = QuestioningState(questions=questions)
            logger.info(f"Session {self.session_id} generated {len(questions)} questions")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    def _validate_intake(self, job_description: str, cv_document: Optional[CVDocumentDTO]):
        if not job_description or not job_description.strip():
            raise InvalidSetupInput("Please enter a job description", details={"field": "job_description"})
        if cv_document is None:
            raise InvalidSetupInput("Please upload your CV as a PDF file", details={"field": "cv"})
        if not cv_document.is_pdf:
            raise InvalidSetupInput(
                "Please upload a PDF file",
                details={"field": "cv", "content_type": cv_document.content_type}
            )

    # ------------------------------------------------------------------
    # QUESTIONING: capture
    # ------------------------------------------------------------------
    async def start_recording(self) -> ActionOutcome:
        action = SessionAction.START_RECORDING
        try:
            self._expect(QuestioningState, action)
            with self.guard.hold(action):
                await self.recorder.begin()
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def stop_recording(self) -> ActionOutcome:
        """
        Completes the capture for the current question and stores it in the ledger.
        Without an active capture this is a no-op.
        """
        action = SessionAction.STOP_RECORDING
        try:
            state = self._expect(QuestioningState, action)
            self.guard.check(action)
            if not self.recorder.is_recording:
                return self._succeed(action)

            with self.guard.hold(action):
                artifact = await self.recorder.end()
            if artifact is None:
                return self._succeed(action)

            question = state.current_question
            self.ledger.upsert(question.id, artifact, prompt_text=question.text)
            logger.info(f"Session {self.session_id}: recorded answer for question {question.id}")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def record_response(self, question_id: str, artifact: bytes) -> ActionOutcome:
        """
        Capture completion delivered from outside the recorder (e.g. an upload).
        """
        action = SessionAction.RECORD_RESPONSE
        try:
            state = self._expect(QuestioningState, action)
            self.guard.check(action)
            question = next((q for q in state.questions if q.id == question_id), None)
            if question is None:
                raise InvalidAction(f"Unknown question {question_id}", details={"question_id": question_id})

            self.ledger.upsert(question.id, artifact, prompt_text=question.text)
            logger.info(f"Session {self.session_id}: stored uploaded answer for question {question.id}")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    # ------------------------------------------------------------------
    # QUESTIONING: navigation
    # ------------------------------------------------------------------
    async def next_question(self) -> ActionOutcome:
        action = SessionAction.NEXT
        try:
            state = self._expect(QuestioningState, action)
            self.guard.check(action)
            if state.is_last_question:
                raise InvalidAction("Already on the last question; submit instead")
            self._require_response(state.current_question)

            await self.recorder.discard()
            self.context.state = state.model_copy(update={"index": state.index + 1})
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def previous_question(self) -> ActionOutcome:
        action = SessionAction.PREVIOUS
        try:
            state = self._expect(QuestioningState, action)
            self.guard.check(action)
            if state.index == 0:
                raise InvalidAction("Already on the first question")

            await self.recorder.discard()
            self.context.state = state.model_copy(update={"index": state.index - 1})
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    def _require_response(self, question: Question):
        if not self.ledger.has(question.id):
            raise MissingResponse(
                "Please record your answer before proceeding.",
                details={"question_id": question.id}
            )

    # ------------------------------------------------------------------
    # QUESTIONING -> CODING | RESULTS
    # ------------------------------------------------------------------
    async def submit_responses(self) -> ActionOutcome:
        """
        Encode every response, submit, and fold the evaluations into the session.
        On failure the cursor stays on the last question and nothing is changed.
        """
        action = SessionAction.SUBMIT
        try:
            state = self._expect(QuestioningState, action)
            self.guard.check(action)
            if not state.is_last_question:
                raise InvalidAction("Answer the remaining questions before submitting")
            if self.recorder.is_recording:
                raise InvalidAction("Stop the recording before submitting")
            self._require_response(state.current_question)
            missing = [q.id for q in state.questions if not self.ledger.has(q.id)]
            if missing:
                raise MissingResponse(
                    "Some questions have no recorded answer.",
                    details={"question_ids": missing}
                )

            with self.guard.hold(action):
                encoded = await self.encoder.encode_all(self.ledger.all())
                evaluations = await self._call(SubmissionFailed, self.submission_sink.submit(encoded))
                ordered = self._pair_evaluations(state.questions, evaluations)

                if self.config.coding_stage_enabled:
                    self.context.state = CodingState(questions=state.questions, evaluations=ordered)
                    logger.info(f"Session {self.session_id} entered CODING")
                    await self._load_coding_prompt()
                else:
                    self.context.state = ResultsState(
                        questions=state.questions,
                        aggregate=SessionAggregate(evaluations=ordered)
                    )
                    logger.info(f"Session {self.session_id} entered RESULTS")

            self._notify("Answers submitted successfully", "Your recordings have been evaluated.")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    def _pair_evaluations(self, questions: Tuple[Question, ...], evaluations: List[Evaluation]) -> Tuple[Evaluation, ...]:
        """
        Match evaluations to questions by identity, never by position.
        The result follows question order.
        """
        by_id: Dict[str, Evaluation] = {}
        known = {q.id for q in questions}
        for evaluation in evaluations or []:
            if evaluation.question_id not in known:
                logger.warning(f"Ignoring evaluation for unknown question {evaluation.question_id}")
                continue
            if evaluation.question_id in by_id:
                logger.warning(f"Duplicate evaluation for question {evaluation.question_id}; keeping the last")
            by_id[evaluation.question_id] = evaluation

        missing = [q.id for q in questions if q.id not in by_id]
        if missing:
            raise SubmissionFailed(
                "Evaluation service did not return a result for every question",
                details={"question_ids": missing}
            )
        return tuple(by_id[q.id] for q in questions)

    # ------------------------------------------------------------------
    # CODING
    # ------------------------------------------------------------------
    async def _load_coding_prompt(self):
        """Lazy fetch on entry to CODING. Failure is reported but keeps the stage."""
        try:
            prompt = await self._call(FetchFailed, self.prompt_source.fetch_prompt())
        except FetchFailed as e:
            self._report(SessionAction.REFETCH_PROMPT, e)
            return
        except IVSBaseError as e:
            # Any failure here is a fetch failure: the submission already succeeded
            failure = FetchFailed(e.message, details={**e.details, "cause": e.code})
            self._report(SessionAction.REFETCH_PROMPT, failure)
            return
        self.context.state = self.context.state.model_copy(update={"prompt": prompt})

    async def refetch_coding_prompt(self) -> ActionOutcome:
        action = SessionAction.REFETCH_PROMPT
        try:
            state = self._expect(CodingState, action)
            self.guard.check(action)
            if state.prompt is not None:
                return self._succeed(action)

            with self.guard.hold(action):
                prompt = await self._call(FetchFailed, self.prompt_source.fetch_prompt())
            self.context.state = state.model_copy(update={"prompt": prompt})
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def submit_code(self, code: str) -> ActionOutcome:
        """
        CODING -> RESULTS once the coding evaluation arrives.
        """
        action = SessionAction.SUBMIT_CODE
        try:
            state = self._expect(CodingState, action)
            self.guard.check(action)
            if state.prompt is None:
                raise InvalidAction("The coding question has not been loaded yet")
            if not code or not code.strip():
                raise EmptyCodeSubmission("Please write some code before submitting.")

            with self.guard.hold(action):
                feedback = await self._call(
                    EvaluationFailed,
                    self.coding_evaluator.evaluate(state.prompt, code)
                )

            coding_evaluation = CodingEvaluation(code=code, score=feedback.score, feedback=feedback.feedback)
            if len(state.evaluations) != len(state.questions):
                raise InvalidAction("Audio evaluations are incomplete")

            self.context.state = ResultsState(
                questions=state.questions,
                aggregate=SessionAggregate(
                    evaluations=state.evaluations,
                    coding_evaluation=coding_evaluation
                )
            )
            logger.info(f"Session {self.session_id} entered RESULTS")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    # ------------------------------------------------------------------
    # RESULTS -> SETUP
    # ------------------------------------------------------------------
    async def restart(self) -> ActionOutcome:
        action = SessionAction.RESTART
        try:
            self._expect(ResultsState, action)
            self.guard.check(action)
            await self.recorder.close()
            self._new_session_scope()
            logger.info(f"Session {self.session_id} restarted")
            return self._succeed(action)
        except IVSBaseError as e:
            return self._fail(action, e)

    async def close(self):
        """Session teardown: release the capture device."""
        await self.recorder.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _expect(self, state_cls: Type[T], action: SessionAction) -> T:
        state = self.context.state
        if not isinstance(state, state_cls):
            raise InvalidAction(
                f"{action.value} is not allowed in {state.stage.value}",
                details={"action": action.value, "stage": state.stage.value}
            )
        return state

    async def _call(self, failure: Type[IVSBaseError], awaitable: Awaitable[T]) -> T:
        """Collaborator calls yield a value or a typed failure, nothing else."""
        try:
            return await awaitable
        except IVSBaseError:
            raise
        except Exception as e:
            logger.exception(f"Collaborator raised an unexpected error in session {self.session_id}")
            raise failure(str(e) or type(e).__name__) from e

    def _succeed(self, action: SessionAction) -> ActionOutcome:
        return ActionOutcome(action=action, stage=self.stage)

    def _fail(self, action: SessionAction, error: IVSBaseError) -> ActionOutcome:
        self._report(action, error)
        return ActionOutcome(action=action, stage=self.stage, error=error)

    def _report(self, action: SessionAction, error: IVSBaseError):
        if isinstance(error, InvalidAction):
            # Contract error: the UI should not have offered this action
            logger.error(f"Session {self.session_id}: {action.value} rejected: {error.message}")
            return

        logger.warning(f"Session {self.session_id}: {action.value} failed: {error}")
        title, description = FAILURE_NOTICES.get(error.code, ("Something went wrong", None))
        self._notify(title, description or error.message, level=NotificationLevel.ERROR, code=error.code)

    def _notify(self, title: str, description: str, level: NotificationLevel = NotificationLevel.INFO, code: Optional[str] = None):
        self.notifier.notify(Notification(title=title, description=description, level=level, code=code))
