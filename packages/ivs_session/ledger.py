from typing import Dict, List, Optional, Tuple
from .dto import Response

class ResponseLedger:
    """
    Mapping of question identity to its current Response.
    At most one entry per question id. A later capture replaces the earlier one
    in place, so snapshot order is the order of first capture.
    """
    def __init__(self):
        self._entries: List[Response] = []
        self._positions: Dict[str, int] = {}

    def upsert(self, question_id: str, artifact: bytes, prompt_text: Optional[str] = None) -> Response:
        response = Response(question_id=question_id, artifact=artifact, prompt_text=prompt_text)
        position = self._positions.get(question_id)
        if position is None:
            self._positions[question_id] = len(self._entries)
            self._entries.append(response)
        else:
            self._entries[position] = response
        return response

    def has(self, question_id: str) -> bool:
        return question_id in self._positions

    def get(self, question_id: str) -> Optional[Response]:
        position = self._positions.get(question_id)
        if position is None:
            return None
        return self._entries[position]

    def all(self) -> Tuple[Response, ...]:
        """Snapshot for submission, in insertion order."""
        return tuple(self._entries)

    def question_ids(self) -> List[str]:
        return [r.question_id for r in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
