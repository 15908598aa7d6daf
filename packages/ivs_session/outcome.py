from dataclasses import dataclass
from typing import Optional
from packages.ivs_core.errors import IVSBaseError
from .state import SessionAction, SessionStage

@dataclass(frozen=True)
class ActionOutcome:
    """
    Result of one engine operation: success, or exactly one typed failure.
    The stage is the one the session is in after the operation.
    """
    action: SessionAction
    stage: SessionStage
    error: Optional[IVSBaseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None
