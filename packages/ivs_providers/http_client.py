"""
HTTP adapter for the remote interview service.

One client covers every remote contract the session engine consumes:
question generation, answer evaluation, coding prompt and coding evaluation.
Transport errors, non-2xx statuses and malformed bodies are mapped to the
typed failure of the contract that was called. Timeout policy lives here,
never in the engine.
"""
import logging
from typing import Any, List, Optional, Type

import httpx

from packages.ivs_core.dto import CVDocumentDTO, CodingFeedbackDTO
from packages.ivs_core.errors import (
    IVSBaseError,
    GenerationFailed,
    SubmissionFailed,
    FetchFailed,
    EvaluationFailed,
)
from packages.ivs_session.dto import Question, EncodedResponse, Evaluation
from .question import IQuestionSource
from .evaluation import ISubmissionSink, ICodingPromptSource, ICodingEvaluator

logger = logging.getLogger("ivs.providers.http")

GENERATE_PATH = "/questions/generate"
EVALUATIONS_PATH = "/evaluations"
CODING_QUESTION_PATH = "/coding/question"
CODING_EVALUATE_PATH = "/coding/evaluate"


def _unwrap(body: Any, key: str) -> Any:
    # The service answers either with a bare list/value or an envelope {key: ...}
    if isinstance(body, dict) and key in body:
        return body[key]
    return body


class HttpInterviewServiceClient(IQuestionSource, ISubmissionSink, ICodingPromptSource, ICodingEvaluator):
    def __init__(
        self,
        base_url: str,
        timeout_sec: Optional[float] = 120.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_sec)

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, failure: Type[IVSBaseError], **kwargs) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"{method} {path} failed with status {status_code}")
            raise failure(
                f"Interview service returned {status_code}",
                details={"path": path, "status_code": status_code}
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} transport error: {e!r}")
            raise failure(
                "Interview service is unreachable",
                details={"path": path, "error": str(e)}
            ) from e
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise failure("Malformed response from interview service", details={"path": path}) from e

    async def generate(self, job_description: str, cv_document: CVDocumentDTO) -> List[Question]:
        body = await self._request(
            "POST",
            GENERATE_PATH,
            GenerationFailed,
            data={"jobDescription": job_description},
            files={"cv": (cv_document.filename, cv_document.content, cv_document.content_type)},
        )
        try:
            items = _unwrap(body, "questions")
            return [Question.model_validate(item) for item in items]
        except (TypeError, ValueError) as e:
            raise GenerationFailed("Malformed question list", details={"error": str(e)}) from e

    async def submit(self, encoded_responses: List[EncodedResponse]) -> List[Evaluation]:
        payload = {"responses": [r.model_dump(by_alias=True) for r in encoded_responses]}
        body = await self._request("POST", EVALUATIONS_PATH, SubmissionFailed, json=payload)
        try:
            items = _unwrap(body, "evaluations")
            return [Evaluation.model_validate(item) for item in items]
        except (TypeError, ValueError) as e:
            raise SubmissionFailed("Malformed evaluation list", details={"error": str(e)}) from e

    async def fetch_prompt(self) -> str:
        body = await self._request("GET", CODING_QUESTION_PATH, FetchFailed)
        prompt = _unwrap(body, "question")
        if not isinstance(prompt, str) or not prompt.strip():
            raise FetchFailed("Coding question is missing from the response")
        return prompt

    async def evaluate(self, prompt: str, code: str) -> CodingFeedbackDTO:
        body = await self._request(
            "POST",
            CODING_EVALUATE_PATH,
            EvaluationFailed,
            json={"question": prompt, "code": code},
        )
        try:
            return CodingFeedbackDTO.model_validate(body)
        except (TypeError, ValueError) as e:
            raise EvaluationFailed("Malformed coding evaluation", details={"error": str(e)}) from e
