from typing import Dict, List, Optional
from packages.ivs_session.engine import InterviewSessionEngine
from packages.ivs_session.repository import SessionRepository

class MemorySessionRepository(SessionRepository):
    """
    In-Memory implementation of SessionRepository.
    Nothing is persisted beyond the process.
    """
    def __init__(self):
        self._store: Dict[str, InterviewSessionEngine] = {}

    def save(self, engine: InterviewSessionEngine) -> None:
        self._store[engine.session_id] = engine

    def get(self, session_id: str) -> Optional[InterviewSessionEngine]:
        return self._store.get(session_id)

    def delete(self, session_id: str) -> None:
        self._store.pop(session_id, None)

    def list_ids(self) -> List[str]:
        return list(self._store.keys())
