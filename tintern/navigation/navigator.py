"""Navigation targets for guard and auth decisions."""

from abc import ABC, abstractmethod
from typing import List, Optional


class Navigator(ABC):
    """Something that can move the user to another route."""

    @abstractmethod
    def navigate(self, location: str) -> None:
        pass


class HistoryNavigator(Navigator):
    """Records every navigation; `current` is the last location."""

    def __init__(self, initial: str = "/"):
        self.history: List[str] = []
        self.current: Optional[str] = initial

    def navigate(self, location: str) -> None:
        self.history.append(location)
        self.current = location
