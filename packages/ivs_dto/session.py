from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

class QuestionDTO(BaseModel):
    """
    Data Transfer Object for Interview Questions.
    Decoupled from internal domain models.
    """
    id: str
    text: str
    kind: str
    category: Optional[str] = None
    sequence_number: int

class EvaluationDTO(BaseModel):
    question_id: str
    question_text: str
    answer_text: str
    score: float
    feedback: str
    band: str

class CodingEvaluationDTO(BaseModel):
    code: str
    score: float
    feedback: str
    band: str

class ResultsDTO(BaseModel):
    """
    Scored summary of a finished session.
    """
    average_score: float
    band: str
    evaluations: List[EvaluationDTO]
    coding_evaluation: Optional[CodingEvaluationDTO] = None

class SessionViewDTO(BaseModel):
    """
    Everything a client needs to render the current stage and enable its actions.
    """
    session_id: str
    stage: str
    created_at: datetime
    coding_stage_enabled: bool
    question_mode: str
    total_questions: int = 0
    current_question_index: Optional[int] = None
    current_question: Optional[QuestionDTO] = None
    answered_question_ids: List[str] = Field(default_factory=list)
    has_response_for_current: bool = False
    is_last_question: bool = False
    can_go_next: bool = False
    can_submit: bool = False
    is_busy: bool = False
    recording_state: str
    recording_elapsed: str = "0:00"
    coding_prompt: Optional[str] = None
    progress_percentage: float = 0.0
    results: Optional[ResultsDTO] = None

class ActionResultDTO(BaseModel):
    """
    Outcome of one session action plus the session as it is afterwards.
    """
    action: str
    ok: bool
    error_code: Optional[str] = None
    message: Optional[str] = None
    session: SessionViewDTO
