import math
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field
from .state import SessionStage, QuestionMode, ScoreBand, score_band

class DomainModel(BaseModel):
    """
    Immutable value object.
    Wire names (camelCase) are accepted as aliases next to field names.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

class QuestionKind(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"

class Question(DomainModel):
    """
    One spoken prompt. Issued once per session and never changed.
    """
    id: str
    text: str
    kind: QuestionKind = Field(alias="type")
    category: Optional[str] = None

class Response(DomainModel):
    """
    Current capture for a question. The artifact is opaque audio bytes.
    """
    question_id: str
    artifact: bytes = Field(repr=False)
    prompt_text: Optional[str] = None

class EncodedResponse(DomainModel):
    """
    Transport form of a Response. Always produced fresh before submission.
    """
    question_id: str = Field(alias="questionId")
    payload: str = Field(alias="audioBlob", repr=False)

class Evaluation(DomainModel):
    question_id: str = Field(alias="questionId")
    question_text: str = Field(alias="questionText")
    answer_text: str = Field(default="", alias="answerText")
    score: float
    feedback: str = ""

    @property
    def band(self) -> ScoreBand:
        return score_band(self.score)

class CodingEvaluation(DomainModel):
    """
    Result of the single coding challenge of a session.
    """
    code: str
    score: float
    feedback: str = ""

    @property
    def band(self) -> ScoreBand:
        return score_band(self.score)

def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

class SessionAggregate(DomainModel):
    """
    Evaluations of a finished session plus the optional coding evaluation.
    """
    evaluations: Tuple[Evaluation, ...] = ()
    coding_evaluation: Optional[CodingEvaluation] = None

    @property
    def scores(self) -> list[float]:
        scores = [e.score for e in self.evaluations]
        if self.coding_evaluation is not None:
            scores.append(self.coding_evaluation.score)
        return scores

    @property
    def average_score(self) -> float:
        scores = self.scores
        if not scores:
            return 0.0
        return round_half_up(sum(scores) / len(scores), 1)

    @property
    def band(self) -> ScoreBand:
        return score_band(self.average_score)

# -------------------------------------------------------------------------
# Session configuration
# -------------------------------------------------------------------------
class SessionConfig(BaseModel):
    """
    Per-session options, resolved at setup and frozen for the session.
    """
    model_config = ConfigDict(frozen=True)

    coding_stage_enabled: bool = Field(default=True, description="Whether a coding challenge follows the spoken questions")
    question_mode: QuestionMode = Field(default=QuestionMode.DYNAMIC, description="DYNAMIC: generated from JD + CV, FIXED: static set")

    @property
    def setup_required(self) -> bool:
        return self.question_mode == QuestionMode.DYNAMIC

# -------------------------------------------------------------------------
# Stage state (tagged variant)
# -------------------------------------------------------------------------
class SetupState(DomainModel):
    stage: Literal[SessionStage.SETUP] = SessionStage.SETUP

class QuestioningState(DomainModel):
    stage: Literal[SessionStage.QUESTIONING] = SessionStage.QUESTIONING
    questions: Tuple[Question, ...]
    index: int = 0

    @property
    def current_question(self) -> Question:
        return self.questions[self.index]

    @property
    def is_last_question(self) -> bool:
        return self.index == len(self.questions) - 1

class CodingState(DomainModel):
    """
    Audio evaluations are already computed; waiting for the coding result.
    prompt is None until the lazy fetch succeeds.
    """
    stage: Literal[SessionStage.CODING] = SessionStage.CODING
    questions: Tuple[Question, ...]
    evaluations: Tuple[Evaluation, ...]
    prompt: Optional[str] = None

class ResultsState(DomainModel):
    stage: Literal[SessionStage.RESULTS] = SessionStage.RESULTS
    questions: Tuple[Question, ...]
    aggregate: SessionAggregate

SessionState = Annotated[
    Union[SetupState, QuestioningState, CodingState, ResultsState],
    Field(discriminator="stage")
]

class SessionContext(BaseModel):
    """
    Runtime context for a session.
    Replaced as a whole on restart.
    """
    session_id: str
    config: SessionConfig
    state: SessionState = Field(default_factory=SetupState)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def stage(self) -> SessionStage:
        return self.state.stage
