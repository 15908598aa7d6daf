from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

class NotificationLevel(str, Enum):
    INFO = "INFO"
    ERROR = "ERROR"

class Notification(BaseModel):
    """
    Transient user-facing message (toast).
    """
    title: str
    description: str
    level: NotificationLevel = NotificationLevel.INFO
    code: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

class Notifier(ABC):
    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass

class MemoryNotifier(Notifier):
    """
    Keeps the most recent notifications until a client drains them.
    """
    def __init__(self, max_items: int = 50):
        self._items: deque = deque(maxlen=max_items)

    def notify(self, notification: Notification) -> None:
        self._items.append(notification)

    def peek(self) -> List[Notification]:
        return list(self._items)

    def drain(self) -> List[Notification]:
        items = list(self._items)
        self._items.clear()
        return items
