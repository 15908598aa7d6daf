import asyncio
import unittest
from typing import List, Optional

from packages.ivs_core.dto import CVDocumentDTO, PDF_CONTENT_TYPE
from packages.ivs_core.errors import (
    ActionInProgress,
    DeviceUnavailable,
    EmptyCodeSubmission,
    EncodingFailed,
    EvaluationFailed,
    FetchFailed,
    GenerationFailed,
    InvalidAction,
    InvalidSetupInput,
    MissingResponse,
    SubmissionFailed,
)
from packages.ivs_providers.evaluation import ICodingPromptSource, ISubmissionSink
from packages.ivs_providers.mock import MockEvaluationClient, MockQuestionSource
from packages.ivs_recording.buffer import RecordingState
from packages.ivs_recording.mock import MockCaptureDevice
from packages.ivs_session.dto import (
    EncodedResponse,
    Evaluation,
    Question,
    QuestionKind,
    SessionConfig,
)
from packages.ivs_session.encoder import ResponseEncoder
from packages.ivs_session.engine import InterviewSessionEngine
from packages.ivs_session.notifier import MemoryNotifier, NotificationLevel
from packages.ivs_session.questions import FixedQuestionSource, FIXED_QUESTIONS
from packages.ivs_session.state import QuestionMode, SessionStage

QUESTIONS = (
    Question(id="q1", text="Tell me about yourself.", kind=QuestionKind.BEHAVIORAL, category="Intro"),
    Question(id="q2", text="Explain a hash map.", kind=QuestionKind.TECHNICAL),
    Question(id="q3", text="Describe a conflict you resolved.", kind=QuestionKind.BEHAVIORAL),
)
SCORES = {"q1": 80, "q2": 60, "q3": 100}

PDF_CV = CVDocumentDTO(filename="cv.pdf", content_type=PDF_CONTENT_TYPE, content=b"%PDF-1.4 mock")

def make_client(**kwargs) -> MockEvaluationClient:
    return MockEvaluationClient(
        scores=SCORES,
        question_texts={q.id: q.text for q in QUESTIONS},
        **kwargs
    )

class ReversingSink(ISubmissionSink):
    """Returns evaluations in the reverse order of submission."""
    def __init__(self, inner: MockEvaluationClient):
        self.inner = inner

    async def submit(self, encoded_responses: List[EncodedResponse]) -> List[Evaluation]:
        return list(reversed(await self.inner.submit(encoded_responses)))

class BlockingSink(ISubmissionSink):
    """Holds the submission open until released."""
    def __init__(self, inner: MockEvaluationClient):
        self.inner = inner
        self.release = asyncio.Event()
        self.entered = asyncio.Event()

    async def submit(self, encoded_responses: List[EncodedResponse]) -> List[Evaluation]:
        self.entered.set()
        await self.release.wait()
        return await self.inner.submit(encoded_responses)

class GatedCaptureDevice(MockCaptureDevice):
    """Holds acquire() open until the gate is set."""
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gate = asyncio.Event()
        self.waiting = asyncio.Event()

    async def acquire(self):
        self.waiting.set()
        await self.gate.wait()
        return await super().acquire()

class MisbehavingPromptSource(ICodingPromptSource):
    async def fetch_prompt(self) -> str:
        raise SubmissionFailed("unexpected upstream error")

class FailingEncoder(ResponseEncoder):
    async def encode_all(self, responses):
        raise EncodingFailed("Could not transcode recordings", details={"question_ids": ["q2"]})

class EngineTestCase(unittest.IsolatedAsyncioTestCase):
    def build_engine(
        self,
        coding: bool = False,
        mode: QuestionMode = QuestionMode.FIXED,
        question_source: Optional[MockQuestionSource] = None,
        client: Optional[MockEvaluationClient] = None,
        sink: Optional[ISubmissionSink] = None,
        device: Optional[MockCaptureDevice] = None,
        prompt_source: Optional[ICodingPromptSource] = None,
        encoder: Optional[ResponseEncoder] = None
    ) -> InterviewSessionEngine:
        self.client = client or make_client()
        self.device = device or MockCaptureDevice(duration_sec=0.05)
        self.notifier = MemoryNotifier()
        self.question_source = question_source or MockQuestionSource()
        return InterviewSessionEngine(
            session_id="test_session_123",
            config=SessionConfig(coding_stage_enabled=coding, question_mode=mode),
            question_source=self.question_source,
            submission_sink=sink or self.client,
            prompt_source=prompt_source or self.client,
            coding_evaluator=self.client,
            capture_device=self.device,
            notifier=self.notifier,
            fixed_source=FixedQuestionSource(QUESTIONS),
            encoder=encoder,
        )

    async def record_current(self, engine: InterviewSessionEngine):
        outcome = await engine.start_recording()
        self.assertTrue(outcome.ok, outcome.error)
        outcome = await engine.stop_recording()
        self.assertTrue(outcome.ok, outcome.error)

    async def answer_all(self, engine: InterviewSessionEngine):
        total = len(engine.questions)
        for i in range(total):
            await self.record_current(engine)
            if i < total - 1:
                outcome = await engine.next_question()
                self.assertTrue(outcome.ok, outcome.error)

    def last_error_codes(self) -> List[str]:
        return [n.code for n in self.notifier.peek() if n.level == NotificationLevel.ERROR]

class TestSetupStage(EngineTestCase):
    async def test_initial_state(self):
        """Verify initial state is SETUP."""
        engine = self.build_engine()
        self.assertEqual(engine.stage, SessionStage.SETUP)
        self.assertEqual(engine.questions, ())

    async def test_fixed_mode_skips_setup(self):
        engine = self.build_engine(mode=QuestionMode.FIXED)
        outcome = await engine.start_session()
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(engine.state.index, 0)
        self.assertEqual(engine.questions, QUESTIONS)
        self.assertEqual(self.question_source.calls, 0)

    async def test_default_fixed_set(self):
        self.assertEqual(len(FIXED_QUESTIONS), 10)
        self.assertEqual(len({q.id for q in FIXED_QUESTIONS}), 10)

    async def test_dynamic_mode_requires_intake(self):
        engine = self.build_engine(mode=QuestionMode.DYNAMIC)
        outcome = await engine.start_session()
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertEqual(engine.stage, SessionStage.SETUP)

    async def test_setup_generates_questions(self):
        engine = self.build_engine(mode=QuestionMode.DYNAMIC, question_source=MockQuestionSource(question_count=4))
        outcome = await engine.complete_setup("Senior Python Engineer\nAsyncio, FastAPI", PDF_CV)
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(len(engine.questions), 4)
        self.assertEqual(engine.state.index, 0)

    async def test_setup_validation(self):
        engine = self.build_engine(mode=QuestionMode.DYNAMIC)

        outcome = await engine.complete_setup("   ", PDF_CV)
        self.assertIsInstance(outcome.error, InvalidSetupInput)

        outcome = await engine.complete_setup("Backend role", None)
        self.assertIsInstance(outcome.error, InvalidSetupInput)

        word_doc = CVDocumentDTO(filename="cv.docx", content_type="application/msword", content=b"doc")
        outcome = await engine.complete_setup("Backend role", word_doc)
        self.assertIsInstance(outcome.error, InvalidSetupInput)

        self.assertEqual(engine.stage, SessionStage.SETUP)
        self.assertEqual(self.question_source.calls, 0)
        self.assertEqual(self.last_error_codes(), [InvalidSetupInput.code] * 3)

    async def test_generation_failure_is_recoverable(self):
        source = MockQuestionSource(should_fail=True)
        engine = self.build_engine(mode=QuestionMode.DYNAMIC, question_source=source)

        outcome = await engine.complete_setup("Backend role", PDF_CV)
        self.assertIsInstance(outcome.error, GenerationFailed)
        self.assertEqual(engine.stage, SessionStage.SETUP)
        self.assertFalse(engine.is_busy)
        self.assertIn(GenerationFailed.code, self.last_error_codes())

        # Retry
        source.should_fail = False
        outcome = await engine.complete_setup("Backend role", PDF_CV)
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)

    async def test_empty_question_list_is_generation_failure(self):
        engine = self.build_engine(mode=QuestionMode.DYNAMIC, question_source=MockQuestionSource(question_count=0))
        outcome = await engine.complete_setup("Backend role", PDF_CV)
        self.assertIsInstance(outcome.error, GenerationFailed)
        self.assertEqual(engine.stage, SessionStage.SETUP)

class TestQuestioningStage(EngineTestCase):
    async def asyncSetUp(self):
        self.engine = self.build_engine()
        await self.engine.start_session()

    async def asyncTearDown(self):
        await self.engine.close()

    async def test_next_requires_response(self):
        """next() from index i succeeds iff the ledger has questions[i]."""
        outcome = await self.engine.next_question()
        self.assertIsInstance(outcome.error, MissingResponse)
        self.assertEqual(self.engine.state.index, 0)
        self.assertEqual(self.last_error_codes(), [MissingResponse.code])

        await self.record_current(self.engine)
        self.assertTrue(self.engine.ledger.has("q1"))
        outcome = await self.engine.next_question()
        self.assertTrue(outcome.ok)
        self.assertEqual(self.engine.state.index, 1)

    async def test_previous(self):
        outcome = await self.engine.previous_question()
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertEqual(self.engine.state.index, 0)

        await self.record_current(self.engine)
        await self.engine.next_question()
        outcome = await self.engine.previous_question()
        self.assertTrue(outcome.ok)
        self.assertEqual(self.engine.state.index, 0)
        # Moving back does not require a response for the current question
        outcome = await self.engine.next_question()
        outcome = await self.engine.previous_question()
        self.assertTrue(outcome.ok)

    async def test_rerecord_replaces_response(self):
        await self.record_current(self.engine)
        first = self.engine.ledger.get("q1").artifact
        self.device.duration_sec = 0.1
        await self.record_current(self.engine)
        self.assertEqual(len(self.engine.ledger), 1)
        self.assertNotEqual(self.engine.ledger.get("q1").artifact, first)
        self.assertEqual(self.engine.ledger.get("q1").prompt_text, QUESTIONS[0].text)

    async def test_stop_without_recording_is_noop(self):
        outcome = await self.engine.stop_recording()
        self.assertTrue(outcome.ok)
        self.assertEqual(len(self.engine.ledger), 0)
        self.assertEqual(self.device.acquire_count, 0)

    async def test_device_unavailable(self):
        self.device.available = False
        outcome = await self.engine.start_recording()
        self.assertIsInstance(outcome.error, DeviceUnavailable)
        self.assertEqual(self.last_error_codes(), [DeviceUnavailable.code])
        self.assertEqual(self.engine.stage, SessionStage.QUESTIONING)

    async def test_record_response_upload(self):
        outcome = await self.engine.record_response("q1", b"RIFF-upload")
        self.assertTrue(outcome.ok)
        self.assertEqual(self.engine.ledger.get("q1").artifact, b"RIFF-upload")

        outcome = await self.engine.record_response("unknown", b"RIFF")
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertFalse(self.engine.ledger.has("unknown"))

    async def test_navigation_releases_active_capture(self):
        await self.record_current(self.engine)
        await self.engine.start_recording()
        self.assertEqual(len(self.device.open_handles), 1)
        outcome = await self.engine.next_question()
        self.assertTrue(outcome.ok)
        self.assertEqual(self.device.open_handles, set())

    async def test_next_on_last_question_is_invalid(self):
        await self.answer_all(self.engine)
        outcome = await self.engine.next_question()
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertEqual(self.engine.state.index, 2)

    async def test_submit_only_from_last_question(self):
        await self.record_current(self.engine)
        outcome = await self.engine.submit_responses()
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertEqual(self.client.submissions, [])

    async def test_submit_requires_current_response(self):
        await self.record_current(self.engine)
        await self.engine.next_question()
        await self.record_current(self.engine)
        await self.engine.next_question()
        outcome = await self.engine.submit_responses()
        self.assertIsInstance(outcome.error, MissingResponse)
        self.assertEqual(self.engine.stage, SessionStage.QUESTIONING)

    async def test_submit_while_recording_is_invalid(self):
        await self.answer_all(self.engine)
        await self.engine.start_recording()
        outcome = await self.engine.submit_responses()
        self.assertIsInstance(outcome.error, InvalidAction)
        self.assertFalse(self.engine.can_submit)

    async def test_actions_outside_stage_are_invalid(self):
        outcome = await self.engine.submit_code("print(1)")
        self.assertIsInstance(outcome.error, InvalidAction)
        outcome = await self.engine.restart()
        self.assertIsInstance(outcome.error, InvalidAction)
        # Contract errors are logged, not shown to the user
        self.assertEqual(self.last_error_codes(), [])

class TestSubmission(EngineTestCase):
    async def test_submit_without_coding_reaches_results(self):
        engine = self.build_engine(coding=False)
        await engine.start_session()
        await self.answer_all(engine)

        outcome = await engine.submit_responses()
        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(engine.stage, SessionStage.RESULTS)
        self.assertEqual(len(engine.aggregate.evaluations), len(QUESTIONS))
        self.assertIsNone(engine.aggregate.coding_evaluation)
        self.assertEqual(engine.aggregate.average_score, 80.0)

    async def test_submission_uses_ledger_order_and_pairs_by_identity(self):
        inner = make_client()
        engine = self.build_engine(client=inner, sink=ReversingSink(inner))
        await engine.start_session()
        await self.answer_all(engine)

        await engine.submit_responses()
        submitted = [r.question_id for r in inner.submissions[0]]
        self.assertEqual(submitted, ["q1", "q2", "q3"])
        self.assertEqual([e.question_id for e in engine.aggregate.evaluations], ["q1", "q2", "q3"])
        self.assertEqual([e.score for e in engine.aggregate.evaluations], [80, 60, 100])

    async def test_failed_submission_keeps_state_and_retry_matches(self):
        engine = self.build_engine(client=make_client(fail_submit=True))
        await engine.start_session()
        await self.answer_all(engine)
        ledger_before = engine.ledger.all()

        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, SubmissionFailed)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(engine.state.index, len(QUESTIONS) - 1)
        self.assertEqual(engine.ledger.all(), ledger_before)
        self.assertIsNone(engine.aggregate)
        self.assertFalse(engine.is_busy)
        self.assertTrue(engine.can_submit)

        # Retry with the same ledger contents
        self.client.fail_submit = False
        outcome = await engine.submit_responses()
        self.assertTrue(outcome.ok)
        self.assertEqual(self.client.submissions[0], self.client.submissions[1])

        reference = self.build_engine()
        await reference.start_session()
        await self.answer_all(reference)
        await reference.submit_responses()
        self.assertEqual(engine.aggregate.evaluations, reference.aggregate.evaluations)

    async def test_incomplete_evaluations_fail_submission(self):
        class DroppingSink(ISubmissionSink):
            async def submit(self, encoded_responses):
                return [
                    Evaluation(question_id=r.question_id, question_text="", score=50)
                    for r in encoded_responses[:-1]
                ]

        engine = self.build_engine(sink=DroppingSink())
        await engine.start_session()
        await self.answer_all(engine)
        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, SubmissionFailed)
        self.assertEqual(outcome.error.details["question_ids"], ["q3"])
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)

    async def test_unexpected_sink_error_becomes_submission_failed(self):
        class CrashingSink(ISubmissionSink):
            async def submit(self, encoded_responses):
                raise ConnectionResetError("peer reset")

        engine = self.build_engine(sink=CrashingSink())
        await engine.start_session()
        await self.answer_all(engine)
        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, SubmissionFailed)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)

    async def test_encoding_failure_keeps_state(self):
        engine = self.build_engine(encoder=FailingEncoder())
        await engine.start_session()
        await self.answer_all(engine)
        ledger_before = engine.ledger.all()

        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, EncodingFailed)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(engine.state.index, len(QUESTIONS) - 1)
        self.assertEqual(engine.ledger.all(), ledger_before)
        self.assertFalse(engine.is_busy)
        self.assertTrue(engine.can_submit)
        self.assertEqual(self.client.submissions, [])
        self.assertEqual(self.last_error_codes(), [EncodingFailed.code])

    async def test_actions_disabled_while_submission_in_flight(self):
        inner = make_client()
        sink = BlockingSink(inner)
        engine = self.build_engine(client=inner, sink=sink)
        await engine.start_session()
        await self.answer_all(engine)

        task = asyncio.create_task(engine.submit_responses())
        await sink.entered.wait()
        self.assertTrue(engine.is_busy)
        self.assertFalse(engine.can_submit)

        for outcome in (
            await engine.submit_responses(),
            await engine.previous_question(),
            await engine.start_recording(),
        ):
            self.assertIsInstance(outcome.error, ActionInProgress)

        sink.release.set()
        outcome = await task
        self.assertTrue(outcome.ok)
        self.assertFalse(engine.is_busy)
        self.assertEqual(len(inner.submissions), 1)

class TestCodingStage(EngineTestCase):
    async def reach_coding(self, engine: InterviewSessionEngine):
        await engine.start_session()
        await self.answer_all(engine)
        outcome = await engine.submit_responses()
        self.assertTrue(outcome.ok, outcome.error)

    async def test_coding_stage_holds_until_code_evaluated(self):
        engine = self.build_engine(coding=True)
        await self.reach_coding(engine)

        self.assertEqual(engine.stage, SessionStage.CODING)
        self.assertEqual(len(engine.state.evaluations), len(QUESTIONS))
        self.assertIsNotNone(engine.state.prompt)
        # Audio evaluations alone never satisfy the results gate
        self.assertIsNone(engine.aggregate)

        outcome = await engine.submit_code("def first_unique(s):\n    return None\n")
        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(engine.stage, SessionStage.RESULTS)
        self.assertEqual(engine.aggregate.coding_evaluation.score, 70)
        self.assertEqual(engine.aggregate.average_score, 77.5)
        self.assertEqual(self.client.evaluated[0][0], self.client.prompt)

    async def test_prompt_is_fetched_lazily(self):
        engine = self.build_engine(coding=True)
        await engine.start_session()
        await self.answer_all(engine)
        self.assertEqual(self.client.fetch_calls, 0)
        await engine.submit_responses()
        self.assertEqual(self.client.fetch_calls, 1)

    async def test_empty_code_rejected(self):
        engine = self.build_engine(coding=True)
        await self.reach_coding(engine)
        outcome = await engine.submit_code("   \n")
        self.assertIsInstance(outcome.error, EmptyCodeSubmission)
        self.assertEqual(engine.stage, SessionStage.CODING)
        self.assertEqual(self.client.evaluated, [])

    async def test_fetch_failure_and_refetch(self):
        engine = self.build_engine(coding=True, client=make_client(fail_fetch=True))
        await self.reach_coding(engine)

        self.assertEqual(engine.stage, SessionStage.CODING)
        self.assertIsNone(engine.state.prompt)
        self.assertIn(FetchFailed.code, self.last_error_codes())

        outcome = await engine.submit_code("print(1)")
        self.assertIsInstance(outcome.error, InvalidAction)

        outcome = await engine.refetch_coding_prompt()
        self.assertIsInstance(outcome.error, FetchFailed)
        self.assertIsNone(engine.state.prompt)

        self.client.fail_fetch = False
        outcome = await engine.refetch_coding_prompt()
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.state.prompt, self.client.prompt)

    async def test_evaluation_failure_keeps_audio_evaluations(self):
        engine = self.build_engine(coding=True, client=make_client(fail_evaluate=True))
        await self.reach_coding(engine)
        evaluations = engine.state.evaluations

        outcome = await engine.submit_code("print(1)")
        self.assertIsInstance(outcome.error, EvaluationFailed)
        self.assertEqual(engine.stage, SessionStage.CODING)
        self.assertEqual(engine.state.evaluations, evaluations)

        self.client.fail_evaluate = False
        outcome = await engine.submit_code("print(1)")
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.stage, SessionStage.RESULTS)

    async def test_unexpected_prompt_error_does_not_fail_submission(self):
        """Once the answers are evaluated, prompt loading only reports a fetch failure."""
        engine = self.build_engine(coding=True, prompt_source=MisbehavingPromptSource())
        await engine.start_session()
        await self.answer_all(engine)

        outcome = await engine.submit_responses()
        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(engine.stage, SessionStage.CODING)
        self.assertIsNone(engine.state.prompt)
        self.assertEqual(len(engine.state.evaluations), len(QUESTIONS))
        self.assertEqual(self.last_error_codes(), [FetchFailed.code])

class TestRecordingConcurrency(EngineTestCase):
    async def test_concurrent_start_recording_holds_one_handle(self):
        engine = self.build_engine(device=GatedCaptureDevice())
        await engine.start_session()

        first = asyncio.create_task(engine.start_recording())
        await self.device.waiting.wait()
        self.assertTrue(engine.is_busy)

        outcome = await engine.start_recording()
        self.assertIsInstance(outcome.error, ActionInProgress)
        outcome = await engine.stop_recording()
        self.assertIsInstance(outcome.error, ActionInProgress)

        self.device.gate.set()
        outcome = await first
        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(len(self.device.open_handles), 1)

        await engine.stop_recording()
        await engine.close()
        self.assertEqual(self.device.open_handles, set())
        self.assertEqual(self.device.acquire_count, self.device.release_count)

    async def test_submit_refused_while_device_is_acquiring(self):
        engine = self.build_engine(device=GatedCaptureDevice())
        self.device.gate.set()
        await engine.start_session()
        await self.answer_all(engine)

        self.device.gate.clear()
        self.device.waiting.clear()
        pending = asyncio.create_task(engine.start_recording())
        await self.device.waiting.wait()
        self.assertEqual(engine.recorder.state, RecordingState.ACQUIRING)
        self.assertFalse(engine.can_submit)

        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, ActionInProgress)
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(self.client.submissions, [])

        self.device.gate.set()
        self.assertTrue((await pending).ok)
        outcome = await engine.submit_responses()
        self.assertIsInstance(outcome.error, InvalidAction)

        await engine.stop_recording()
        outcome = await engine.submit_responses()
        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(engine.stage, SessionStage.RESULTS)
        self.assertEqual(self.device.open_handles, set())

class TestRestart(EngineTestCase):
    async def test_restart_replaces_session_scope(self):
        """Restart then a fresh QUESTIONING stage shows an empty ledger at index 0."""
        engine = self.build_engine()
        await engine.start_session()
        await self.answer_all(engine)
        await engine.submit_responses()
        old_ledger = engine.ledger
        old_recorder = engine.recorder

        outcome = await engine.restart()
        self.assertTrue(outcome.ok)
        self.assertEqual(engine.stage, SessionStage.SETUP)
        self.assertIsNone(engine.aggregate)
        self.assertIsNot(engine.ledger, old_ledger)
        self.assertIsNot(engine.recorder, old_recorder)

        await engine.start_session()
        self.assertEqual(engine.stage, SessionStage.QUESTIONING)
        self.assertEqual(engine.ledger.all(), ())
        self.assertEqual(engine.state.index, 0)

    async def test_close_releases_device(self):
        engine = self.build_engine()
        await engine.start_session()
        await engine.start_recording()
        await engine.close()
        self.assertEqual(self.device.open_handles, set())

if __name__ == "__main__":
    unittest.main()
