from packages.ivs_dto.session import (
    QuestionDTO,
    EvaluationDTO,
    CodingEvaluationDTO,
    ResultsDTO,
    SessionViewDTO,
    ActionResultDTO,
)
from packages.ivs_session.dto import QuestioningState, CodingState, SessionAggregate
from packages.ivs_session.engine import InterviewSessionEngine
from packages.ivs_session.outcome import ActionOutcome
from packages.ivs_recording.buffer import format_elapsed


class SessionMapper:
    """
    Explicit Mapper to convert the engine and its domain objects to DTOs.
    Ensures no domain objects leak into the API layer.
    """

    @staticmethod
    def to_dto(engine: InterviewSessionEngine) -> SessionViewDTO:
        state = engine.state
        questions = engine.questions
        total = len(questions)

        view = SessionViewDTO(
            session_id=engine.session_id,
            stage=engine.stage.value,
            created_at=engine.context.created_at,
            coding_stage_enabled=engine.config.coding_stage_enabled,
            question_mode=engine.config.question_mode.value,
            total_questions=total,
            answered_question_ids=engine.ledger.question_ids(),
            can_go_next=engine.can_go_next,
            can_submit=engine.can_submit,
            is_busy=engine.is_busy,
            recording_state=engine.recorder.state.value,
            recording_elapsed=format_elapsed(engine.recorder.elapsed_seconds),
        )

        if isinstance(state, QuestioningState):
            question = state.current_question
            view.current_question_index = state.index
            view.current_question = QuestionDTO(
                id=question.id,
                text=question.text,
                kind=question.kind.value,
                category=question.category,
                sequence_number=state.index + 1,
            )
            view.has_response_for_current = engine.ledger.has(question.id)
            view.is_last_question = state.is_last_question
            view.progress_percentage = round((state.index + 1) / total * 100, 1) if total else 0.0
        elif isinstance(state, CodingState):
            view.coding_prompt = state.prompt
            view.progress_percentage = 100.0
        elif engine.aggregate is not None:
            view.results = SessionMapper.to_results_dto(engine.aggregate)
            view.progress_percentage = 100.0

        return view

    @staticmethod
    def to_results_dto(aggregate: SessionAggregate) -> ResultsDTO:
        coding = aggregate.coding_evaluation
        return ResultsDTO(
            average_score=aggregate.average_score,
            band=aggregate.band.value,
            evaluations=[
                EvaluationDTO(
                    question_id=e.question_id,
                    question_text=e.question_text,
                    answer_text=e.answer_text,
                    score=e.score,
                    feedback=e.feedback,
                    band=e.band.value,
                )
                for e in aggregate.evaluations
            ],
            coding_evaluation=CodingEvaluationDTO(
                code=coding.code,
                score=coding.score,
                feedback=coding.feedback,
                band=coding.band.value,
            ) if coding else None,
        )

    @staticmethod
    def to_action_dto(outcome: ActionOutcome, engine: InterviewSessionEngine) -> ActionResultDTO:
        return ActionResultDTO(
            action=outcome.action.value,
            ok=outcome.ok,
            error_code=outcome.error_code,
            message=outcome.error.message if outcome.error else None,
            session=SessionMapper.to_dto(engine),
        )
