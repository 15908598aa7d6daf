from abc import ABC, abstractmethod
from typing import List
from packages.ivs_core.dto import CVDocumentDTO
from packages.ivs_session.dto import Question

class IQuestionSource(ABC):
    @abstractmethod
    async def generate(self, job_description: str, cv_document: CVDocumentDTO) -> List[Question]:
        """
        Generate the question set for a session from a job description and a CV.

        Returns:
            List[Question]: Ordered question set.

        Raises:
            GenerationFailed: On any transport or payload failure.
        """
        pass
