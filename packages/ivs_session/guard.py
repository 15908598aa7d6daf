from contextlib import contextmanager
from typing import Optional
from packages.ivs_core.errors import ActionInProgress

class ActionGuard:
    """
    Keeps at most one collaborator call in flight per session.
    Enforces FAIL-FAST policy: if an action is outstanding, immediately raise.
    The flag is released on success and on failure alike.
    """
    def __init__(self):
        self._active: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._active is not None

    def check(self, action: str):
        if self._active is not None:
            raise ActionInProgress(
                f"Cannot {action} while {self._active} is in progress.",
                details={"requested": action, "active": self._active}
            )

    @contextmanager
    def hold(self, action: str):
        self.check(action)
        self._active = action
        try:
            yield
        finally:
            self._active = None
