from abc import ABC, abstractmethod
from typing import List
from packages.ivs_core.dto import CodingFeedbackDTO
from packages.ivs_session.dto import EncodedResponse, Evaluation

class ISubmissionSink(ABC):
    @abstractmethod
    async def submit(self, encoded_responses: List[EncodedResponse]) -> List[Evaluation]:
        """
        Submit encoded answers and receive one Evaluation per answer.
        Raises SubmissionFailed.
        """
        pass

class ICodingPromptSource(ABC):
    @abstractmethod
    async def fetch_prompt(self) -> str:
        """Raises FetchFailed."""
        pass

class ICodingEvaluator(ABC):
    @abstractmethod
    async def evaluate(self, prompt: str, code: str) -> CodingFeedbackDTO:
        """Raises EvaluationFailed."""
        pass
