import asyncio
from typing import Dict, List, Optional, Tuple
from packages.ivs_core.dto import CVDocumentDTO, CodingFeedbackDTO
from packages.ivs_core.errors import GenerationFailed, SubmissionFailed, FetchFailed, EvaluationFailed
from packages.ivs_session.dto import Question, QuestionKind, EncodedResponse, Evaluation
from .question import IQuestionSource
from .evaluation import ISubmissionSink, ICodingPromptSource, ICodingEvaluator

MOCK_CODING_PROMPT = (
    "Write a function that returns the first non-repeating character of a string, "
    "or None if every character repeats."
)

class MockQuestionSource(IQuestionSource):
    """
    Mock question generator for local development and tests.
    Simulates latency and failure scenarios.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0, question_count: int = 3):
        self.should_fail = should_fail
        self.latency = latency
        self.question_count = question_count
        self.calls = 0

    async def generate(self, job_description: str, cv_document: CVDocumentDTO) -> List[Question]:
        self.calls += 1
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            raise GenerationFailed("Mock Failure: Intentional Error")

        topic = job_description.splitlines()[0][:60] if job_description else "this role"
        questions = []
        for i in range(self.question_count):
            kind = QuestionKind.BEHAVIORAL if i % 2 == 0 else QuestionKind.TECHNICAL
            questions.append(Question(
                id=f"gen-{i + 1}",
                text=f"Question {i + 1} about {topic} (based on {cv_document.filename})",
                kind=kind,
                category="Generated",
            ))
        return questions

class MockEvaluationClient(ISubmissionSink, ICodingPromptSource, ICodingEvaluator):
    """
    Deterministic evaluation service: same input, same output.
    Each remote contract can be made to fail independently.
    """
    def __init__(
        self,
        scores: Optional[Dict[str, float]] = None,
        default_score: float = 75.0,
        coding_score: float = 70.0,
        prompt: str = MOCK_CODING_PROMPT,
        fail_submit: bool = False,
        fail_fetch: bool = False,
        fail_evaluate: bool = False,
        latency: float = 0.0,
        question_texts: Optional[Dict[str, str]] = None
    ):
        self.scores = scores or {}
        self.default_score = default_score
        self.coding_score = coding_score
        self.prompt = prompt
        self.fail_submit = fail_submit
        self.fail_fetch = fail_fetch
        self.fail_evaluate = fail_evaluate
        self.latency = latency
        self.question_texts = question_texts or {}
        self.submissions: List[List[EncodedResponse]] = []
        self.evaluated: List[Tuple[str, str]] = []
        self.fetch_calls = 0

    async def _delay(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def submit(self, encoded_responses: List[EncodedResponse]) -> List[Evaluation]:
        await self._delay()
        self.submissions.append(list(encoded_responses))
        if self.fail_submit:
            raise SubmissionFailed("Mock Failure: Intentional Error")

        return [
            Evaluation(
                question_id=r.question_id,
                question_text=self.question_texts.get(r.question_id, f"Question {r.question_id}"),
                answer_text=f"Transcript of a {len(r.payload)}-character recording.",
                score=self.scores.get(r.question_id, self.default_score),
                feedback="Clear structure. Add a measurable outcome.",
            )
            for r in encoded_responses
        ]

    async def fetch_prompt(self) -> str:
        await self._delay()
        self.fetch_calls += 1
        if self.fail_fetch:
            raise FetchFailed("Mock Failure: Intentional Error")
        return self.prompt

    async def evaluate(self, prompt: str, code: str) -> CodingFeedbackDTO:
        await self._delay()
        self.evaluated.append((prompt, code))
        if self.fail_evaluate:
            raise EvaluationFailed("Mock Failure: Intentional Error")
        return CodingFeedbackDTO(
            score=self.coding_score,
            feedback="Correct approach. Consider the empty string case."
        )
