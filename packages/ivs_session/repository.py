from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import InterviewSessionEngine

class SessionRepository(ABC):
    """
    Interface for live session storage.
    Sessions live for the lifetime of the process only.
    """
    @abstractmethod
    def save(self, engine: "InterviewSessionEngine") -> None:
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional["InterviewSessionEngine"]:
        pass

    @abstractmethod
    def delete(self, session_id: str) -> None:
        pass

    @abstractmethod
    def list_ids(self) -> List[str]:
        pass
