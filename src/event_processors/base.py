import logging
from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel

from src.integrations.github.api import github_client
from src.tasks.task_queue import Task

logger = logging.getLogger(__name__)


class ProcessingState(str, Enum):
    """
    Processing state for event processing results.

    - PASS: The pipeline finished or stopped early on purpose
    - FAIL: A step reported a failure
    """

    PASS = "pass"
    FAIL = "fail"


class ProcessingResult(BaseModel):
    """Result of event processing."""

    state: ProcessingState
    reason: str | None = None
    visible: bool = True
    processing_time_ms: int

    @property
    def success(self) -> bool:
        return self.state == ProcessingState.PASS


class BaseEventProcessor(ABC):
    """Base class for all event processors."""

    def __init__(self):
        self.github_client = github_client

    @abstractmethod
    async def process(self, task: Task) -> ProcessingResult:
        """Process the event task."""
        raise NotImplementedError("Subclasses must implement process")

    @abstractmethod
    def get_event_type(self) -> str:
        """Get the event type this processor handles."""
        raise NotImplementedError("Subclasses must implement get_event_type")
